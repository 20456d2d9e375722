"""Tag normalization.

Every tag list that enters the system (LLM extraction output, stored rows,
user input) is canonicalized here so the rest of the engine can rely on:

- lowercase, trimmed, single-spaced phrases
- 1-3 space-delimited tokens, at most 40 characters
- no duplicates (first occurrence wins), at most 12 entries

Malformed input never raises; it degrades to an empty list.
"""

import json
import re
from collections.abc import Iterable, Mapping
from typing import Any

from profile_matching.matching.types import TAG_SLOTS, TagSet

MAX_TAGS = 12
MAX_TAG_WORDS = 3
MAX_TAG_CHARS = 40

_WHITESPACE = re.compile(r"\s+")


def _clean_phrase(value: Any) -> str:
    return _WHITESPACE.sub(" ", str(value).lower().strip())


def normalize_tag_list(raw: Any) -> list[str]:
    """Normalize an arbitrary value into a bounded, deduplicated list of phrases.

    Args:
        raw: Anything. Only lists and tuples produce output; every element is
            stringified before cleaning.

    Returns:
        At most MAX_TAGS phrases in first-seen order.
    """
    if not isinstance(raw, (list, tuple)):
        return []

    seen: set[str] = set()
    result: list[str] = []
    for item in raw:
        phrase = _clean_phrase(item)
        if not phrase:
            continue
        if len(phrase.split(" ")) > MAX_TAG_WORDS or len(phrase) > MAX_TAG_CHARS:
            continue
        if phrase in seen:
            continue
        seen.add(phrase)
        result.append(phrase)
    return result[:MAX_TAGS]


def ensure_tags_shape(obj: Any) -> TagSet:
    """Build a TagSet from an arbitrary object, normalizing each of the four slots."""
    if not isinstance(obj, Mapping):
        obj = {}
    return TagSet(**{slot: normalize_tag_list(obj.get(slot) or []) for slot in TAG_SLOTS})


def parse_json(value: Any, default: Any = None) -> Any:
    """Decode a JSON column value, returning ``default`` for None or undecodable input.

    Lists are passed through unchanged so already-decoded values are accepted.
    """
    if value is None:
        return default
    if isinstance(value, list):
        return value
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return default


def coerce_tag_list(value: Any) -> list[str]:
    """Read a stored tag column (array, JSON text, or garbage) as a list of strings."""
    parsed = parse_json(value, [])
    if not isinstance(parsed, (list, tuple)):
        return []
    return [str(tag) for tag in parsed if tag is not None]


def overlap(a: Iterable[str], b: Iterable[str]) -> list[str]:
    """Items of ``a`` that also appear in ``b``, deduplicated, in ``a``'s order."""
    b_set = set(b)
    return [item for item in dict.fromkeys(a) if item in b_set]
