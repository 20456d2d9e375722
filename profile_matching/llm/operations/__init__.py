"""LLM operation modules.

Each module contains:
- The prompt or request shape for one task
- An async function that performs the operation through OpenRouterResource
"""

from profile_matching.llm.operations.embed_text import (
    EmbedTextResult,
    MalformedEmbeddingResponse,
    embed_text,
    parse_embedding_response,
)
from profile_matching.llm.operations.extract_tags import (
    PROMPT_VERSION as TAGS_PROMPT_VERSION,
)
from profile_matching.llm.operations.extract_tags import (
    ExtractTagsResult,
    TagExtractionError,
    build_extract_payload,
    extract_profile_tags,
)

__all__ = [
    "EmbedTextResult",
    "MalformedEmbeddingResponse",
    "embed_text",
    "parse_embedding_response",
    "TAGS_PROMPT_VERSION",
    "ExtractTagsResult",
    "TagExtractionError",
    "build_extract_payload",
    "extract_profile_tags",
]
