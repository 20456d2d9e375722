"""LLM operations for the profile matching pipeline.

Operations are versioned so prompt changes can be traced in llm_costs and run
metadata.
"""

from profile_matching.llm.operations import (
    TAGS_PROMPT_VERSION,
    ExtractTagsResult,
    TagExtractionError,
    build_extract_payload,
    embed_text,
    extract_profile_tags,
)

__all__ = [
    "TAGS_PROMPT_VERSION",
    "ExtractTagsResult",
    "TagExtractionError",
    "build_extract_payload",
    "embed_text",
    "extract_profile_tags",
]
