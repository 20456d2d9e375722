"""Text embedding operation using OpenRouter's embeddings API.

The response is validated strictly: exactly one numeric vector per input, or
the whole response is rejected with MalformedEmbeddingResponse. Callers decide
how to degrade; nothing here partially trusts a bad payload.
"""

from typing import TYPE_CHECKING, Any

from profile_matching.matching.vectors import EMBED_DIM, l2norm

if TYPE_CHECKING:
    from profile_matching.resources.openrouter import OpenRouterResource

# Default model for embeddings; supports truncation to EMBED_DIM via `dimensions`
DEFAULT_MODEL = "openai/text-embedding-3-small"


class MalformedEmbeddingResponse(ValueError):
    """The embeddings API answered, but not with one vector per input."""


class EmbedTextResult:
    """Validated embeddings with usage stats for Dagster metadata."""

    def __init__(
        self,
        embeddings: list[list[float]],
        usage: dict[str, Any],
        model: str,
    ):
        self.embeddings = embeddings
        self.usage = usage
        self.model = model

    @property
    def input_tokens(self) -> int:
        return self.usage.get("prompt_tokens", 0)

    @property
    def cost_usd(self) -> float:
        return float(self.usage.get("cost", 0))

    @property
    def dimensions(self) -> int:
        if self.embeddings:
            return len(self.embeddings[0])
        return 0


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_embedding_response(
    data: Any, expected: int, dimensions: int = EMBED_DIM
) -> list[list[float]]:
    """Extract exactly ``expected`` unit vectors from an OpenAI-style embeddings payload.

    Items are ordered by their ``index`` field when every item carries one.

    Raises:
        MalformedEmbeddingResponse: On any deviation from the expected shape.
    """
    if not isinstance(data, dict) or not isinstance(data.get("data"), list):
        raise MalformedEmbeddingResponse("response has no 'data' list")

    items = data["data"]
    if len(items) != expected:
        raise MalformedEmbeddingResponse(f"expected {expected} embeddings, got {len(items)}")

    if all(isinstance(item, dict) and isinstance(item.get("index"), int) for item in items):
        items = sorted(items, key=lambda item: item["index"])

    vectors: list[list[float]] = []
    for position, item in enumerate(items):
        values = item.get("embedding") if isinstance(item, dict) else None
        if not isinstance(values, list) or not values or not all(map(_is_number, values)):
            raise MalformedEmbeddingResponse(f"item {position} has no numeric 'embedding'")
        if len(values) < dimensions:
            raise MalformedEmbeddingResponse(
                f"item {position} has {len(values)} dimensions, expected {dimensions}"
            )
        vectors.append(l2norm([float(x) for x in values[:dimensions]]))
    return vectors


async def embed_text(
    openrouter: "OpenRouterResource",
    texts: list[str],
    model: str | None = None,
    dimensions: int = EMBED_DIM,
    timeout: float | None = None,
) -> EmbedTextResult:
    """Embed a batch of texts with OpenRouter.

    Args:
        openrouter: OpenRouterResource instance for API calls
        texts: Texts to embed, one vector returned per text
        model: Embedding model to use (defaults to text-embedding-3-small)
        dimensions: Output dimensionality requested and enforced
        timeout: HTTP timeout in seconds

    Returns:
        EmbedTextResult with unit-length embeddings in input order

    Raises:
        MalformedEmbeddingResponse: If the response shape is wrong
        httpx.HTTPError: On transport or HTTP status errors
    """
    model = model or DEFAULT_MODEL

    response = await openrouter.embed(
        input=texts,
        model=model,
        dimensions=dimensions,
        operation="embed",
        timeout=timeout,
    )

    embeddings = parse_embedding_response(response, len(texts), dimensions)
    usage = response.get("usage") or {}
    return EmbedTextResult(embeddings=embeddings, usage=usage, model=model)
