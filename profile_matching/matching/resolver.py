"""Cache-or-compute resolution of a profile's two embeddings.

Stored vectors are trusted as cache entries. A missing side is computed from
its tags (one embedding per tag, averaged) and both sides are written back in
a single update so later calls hit the cache.
"""

import asyncio
import logging

from profile_matching.matching.repository import EmbeddingProvider, ProfileRepository
from profile_matching.matching.types import ProfileRecord, ProfileVectors
from profile_matching.matching.vectors import mean_vec

logger = logging.getLogger(__name__)

OFFERING_PREFIX = "offering"
LOOKING_PREFIX = "looking"


async def _embed_tags(embedder: EmbeddingProvider, prefix: str, tags: list[str]) -> list[float]:
    vectors = await embedder.embed_batch([f"{prefix}: {tag}" for tag in tags])
    return mean_vec(vectors)


async def ensure_vectors(
    profile: ProfileRecord,
    embedder: EmbeddingProvider,
    repository: ProfileRepository | None = None,
) -> ProfileVectors:
    """Return both vectors for ``profile``, computing and persisting missing ones.

    A side with no tags resolves to an empty list. Persistence failures are
    logged and do not affect the returned vectors.
    """
    offering_vec = list(profile.offering_vec or [])
    looking_vec = list(profile.looking_vec or [])
    dirty = False

    if not offering_vec and profile.tags.offering:
        offering_vec = await _embed_tags(embedder, OFFERING_PREFIX, profile.tags.offering)
        dirty = True

    if not looking_vec and profile.tags.looking_for:
        looking_vec = await _embed_tags(embedder, LOOKING_PREFIX, profile.tags.looking_for)
        dirty = True

    if repository is not None and profile.id and dirty and (offering_vec or looking_vec):
        try:
            await asyncio.to_thread(
                repository.update_vectors, profile.id, offering_vec, looking_vec
            )
        except Exception:
            logger.warning("Failed to persist vectors for profile %s", profile.id, exc_info=True)
        else:
            logger.debug("Cached vectors for profile %s", profile.id)

    return ProfileVectors(offering_vec=offering_vec, looking_vec=looking_vec)
