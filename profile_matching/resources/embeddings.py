"""Embedding resource: remote embeddings with a deterministic offline fallback.

The remote call goes through OpenRouter with an enforced timeout. Any failure
(missing key, network error, rate limit, timeout, malformed response) falls
back to the n-gram hash embedding, so ranking keeps working offline.
"""

import asyncio
import logging
import os
from collections.abc import Sequence

from dagster import ConfigurableResource
from pydantic import Field

from profile_matching.llm.operations.embed_text import embed_text
from profile_matching.matching.vectors import EMBED_DIM, hash_embed_batch
from profile_matching.resources.openrouter import OpenRouterResource

logger = logging.getLogger(__name__)


def _default_timeout() -> float:
    return float(os.getenv("EMBEDDING_TIMEOUT_SECONDS", "20"))


class EmbeddingResource(ConfigurableResource):
    """Turns text into EMBED_DIM-dimensional unit vectors.

    Set ``remote_enabled=False`` (or leave the OpenRouter key empty) to use
    only the deterministic hash embedding, e.g. in local development.
    """

    openrouter: OpenRouterResource
    model: str = Field(
        default_factory=lambda: os.getenv("EMBEDDING_MODEL", "openai/text-embedding-3-small"),
        description="OpenRouter embedding model",
    )
    dimensions: int = Field(
        default=EMBED_DIM,
        description="Vector dimensions; must match the profiles.*_vec columns",
    )
    timeout_seconds: float = Field(
        default_factory=_default_timeout,
        description="Upper bound for one remote embedding call before falling back",
    )
    remote_enabled: bool = Field(
        default=True,
        description="If False, always use the deterministic hash embedding",
    )

    async def _embed_remote(self, items: list[str]) -> list[list[float]]:
        result = await asyncio.wait_for(
            embed_text(
                self.openrouter,
                items,
                model=self.model,
                dimensions=self.dimensions,
                timeout=self.timeout_seconds,
            ),
            timeout=self.timeout_seconds,
        )
        return result.embeddings

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed non-empty texts; blank entries are dropped and produce no output.

        Args:
            texts: Texts to embed

        Returns:
            One unit vector per non-blank input, in input order
        """
        items = [text.strip() for text in (texts or []) if text and text.strip()]
        if not items:
            return []

        if not (self.remote_enabled and self.openrouter.is_configured):
            return hash_embed_batch(items)

        try:
            return await self._embed_remote(items)
        except Exception as exc:
            logger.warning(
                "Remote embedding failed for %d texts (%s: %s); using hash embedding",
                len(items),
                type(exc).__name__,
                exc,
            )
            return hash_embed_batch(items)
