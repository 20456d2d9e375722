"""Profile keyword extraction LLM operation.

Extracts four tag lists (title, company, looking_for, offering) from a profile
payload. The first attempt asks for schema-constrained JSON; if that fails the
operation retries once without constraints and salvages the JSON from the
text. Output always goes through the tag normalizer.

Bump PROMPT_VERSION when changing the prompt.
"""

import json
import logging
import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import httpx

from profile_matching.matching.tags import ensure_tags_shape
from profile_matching.matching.types import TagSet

if TYPE_CHECKING:
    from profile_matching.resources.openrouter import OpenRouterResource

logger = logging.getLogger(__name__)

# Format: MAJOR.MINOR.PATCH
# - MAJOR: Breaking changes to output schema
# - MINOR: New rules or significant prompt improvements
# - PATCH: Minor wording tweaks
PROMPT_VERSION = "1.0.0"

DEFAULT_MODEL = "google/gemini-2.0-flash-lite-001"
TEMPERATURE = 0.2

MAX_EDUCATION_ROWS = 8
MAX_EXPERIENCE_ROWS = 12

SYSTEM_PROMPT = """You extract four lists from a person's profile for use in a matching system.

OUTPUT (JSON only):
{
  "title": [],        // roles/specialties (e.g., "product designer", "student")
  "company": [],      // orgs/schools only (e.g., "mcmaster university")
  "looking_for": [],  // FIRST: any core goals if implied; THEN specific topics/communities/activities
  "offering": []      // FIRST: any core goals if implied; THEN skills/topics/tools/languages/interests
}

CORE GOALS (canonical tokens):
["hiring","networking","investment","entertainment","learning"]

DIRECTIONAL RULES:
- "networking" and "entertainment" are symmetric: put them in looking_for only.
  If the person offers them, convert to concrete offerings such as "introductions",
  "referrals", "host meetup" or "performer".
- "hiring", "investment" and "learning" may appear in looking_for and/or offering:
    looking_for "investment" pairs with offering "investment" (investor, vc, angel)
    looking_for "hiring" pairs with offering "hiring" (we are hiring)
    offering "learning" means mentor, teacher, workshops or speaker

SYNONYMS -> CANONICAL (do not over-generalize):
- "vc", "funding", "investor", "angel" -> "investment"
- "hire", "recruiting", "jobs" -> "hiring"
- "meet people", "connections", "network" -> "networking"
- "talks", "workshops", "education", "classes" -> "learning"
- "fun", "music", "show", "party", "festival" -> "entertainment"

RULES:
- JSON only. lowercase. 1-3 words each. At most 10 items per list. No duplicates.
- Prefer canonical phrases; split slash-compounds ("ai/ml" -> ["ai", "ml"]).
- Keep technical specificity; you may also include a clear parent (e.g., "llm", "nlp", "ai").
- Do NOT put organization names in looking_for or offering.
- Sensitive traits only if self-identified, phrased as a community (e.g., "punjabi community"). Never infer.
- If there is no evidence for a field, return [].
"""

TAGS_JSON_SCHEMA = {
    "type": "json_schema",
    "json_schema": {
        "name": "profile_tags",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "title": {"type": "array", "items": {"type": "string"}},
                "company": {"type": "array", "items": {"type": "string"}},
                "looking_for": {"type": "array", "items": {"type": "string"}},
                "offering": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["title", "company", "looking_for", "offering"],
            "additionalProperties": False,
        },
    },
}

_CODE_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_CODE_FENCE_END = re.compile(r"```$")
_TRAILING_OBJECT = re.compile(r"\{.*\}$", re.DOTALL)


class TagExtractionError(RuntimeError):
    """Both the structured and the relaxed extraction attempts failed."""


class ExtractTagsResult:
    """Result of tag extraction with usage stats for Dagster metadata."""

    def __init__(
        self,
        tags: TagSet,
        usage: dict[str, Any],
        model: str,
        prompt_version: str,
        relaxed: bool = False,
    ):
        self.tags = tags
        self.usage = usage
        self.model = model
        self.prompt_version = prompt_version
        # True when the unconstrained second attempt produced the tags
        self.relaxed = relaxed

    @property
    def input_tokens(self) -> int:
        return self.usage.get("prompt_tokens", 0)

    @property
    def output_tokens(self) -> int:
        return self.usage.get("completion_tokens", 0)

    @property
    def cost_usd(self) -> float:
        return float(self.usage.get("cost", 0))


def build_extract_payload(
    text: str | None = None,
    headline: str | None = None,
    about: str | None = None,
    education: Iterable[Mapping[str, Any]] = (),
    experience: Iterable[Mapping[str, Any]] = (),
) -> dict[str, Any]:
    """Build the extractor input.

    Free text, when given, is used alone as ``about``. Otherwise the profile's
    headline/about plus its first education and experience rows are sent.
    """
    if text:
        return {"headline": "", "about": text, "education": [], "experience": []}
    return {
        "headline": headline or "",
        "about": about or "",
        "education": [dict(row) for row in list(education)[:MAX_EDUCATION_ROWS]],
        "experience": [dict(row) for row in list(experience)[:MAX_EXPERIENCE_ROWS]],
    }


def _message_text(response: dict[str, Any]) -> str:
    choices = response.get("choices") or []
    if not choices:
        return ""
    content = (choices[0].get("message") or {}).get("content")
    return (content or "").strip()


def salvage_json(raw: str) -> Any:
    """Parse JSON from a free-form model reply.

    Strips ```json fences and, when prose surrounds the object, parses the
    trailing ``{...}`` block.

    Raises:
        ValueError: If nothing parseable remains.
    """
    cleaned = _CODE_FENCE_START.sub("", raw.strip())
    cleaned = _CODE_FENCE_END.sub("", cleaned).strip()
    match = _TRAILING_OBJECT.search(cleaned)
    return json.loads(match.group(0) if match else cleaned)


async def _extract_structured(
    openrouter: "OpenRouterResource", payload: dict[str, Any], model: str
) -> tuple[Any, dict[str, Any]]:
    response = await openrouter.complete(
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": json.dumps(payload, default=str)},
        ],
        model=model,
        operation="extract_tags",
        response_format=TAGS_JSON_SCHEMA,
        temperature=TEMPERATURE,
    )
    raw = _message_text(response)
    if not raw:
        raise ValueError("Empty model response")
    return json.loads(raw), response.get("usage") or {}


async def _extract_relaxed(
    openrouter: "OpenRouterResource", payload: dict[str, Any], model: str
) -> tuple[Any, dict[str, Any]]:
    prompt = f"{SYSTEM_PROMPT}\nReturn JSON only, no prose.\n\nINPUT:\n{json.dumps(payload, default=str)}"
    response = await openrouter.complete(
        messages=[{"role": "user", "content": prompt}],
        model=model,
        operation="extract_tags_relaxed",
        temperature=TEMPERATURE,
    )
    return salvage_json(_message_text(response)), response.get("usage") or {}


async def extract_profile_tags(
    openrouter: "OpenRouterResource",
    payload: dict[str, Any],
    model: str | None = None,
) -> ExtractTagsResult:
    """Extract normalized tags from a profile payload.

    Args:
        openrouter: OpenRouterResource instance for API calls
        payload: Output of build_extract_payload
        model: Chat model to use

    Returns:
        ExtractTagsResult whose tags are always normalized

    Raises:
        TagExtractionError: If both attempts fail
    """
    model = model or DEFAULT_MODEL

    try:
        data, usage = await _extract_structured(openrouter, payload, model)
        return ExtractTagsResult(ensure_tags_shape(data), usage, model, PROMPT_VERSION)
    except (httpx.HTTPError, ValueError, KeyError) as exc:
        logger.warning("Structured tag extraction failed (%s); retrying relaxed", exc)

    try:
        data, usage = await _extract_relaxed(openrouter, payload, model)
    except (httpx.HTTPError, ValueError, KeyError) as exc:
        raise TagExtractionError(f"Tag extraction failed: {exc}") from exc
    return ExtractTagsResult(ensure_tags_shape(data), usage, model, PROMPT_VERSION, relaxed=True)
