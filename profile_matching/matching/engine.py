"""Match engine: resolve vectors, score every candidate, diversify the top results."""

import asyncio
import logging

from profile_matching.matching.repository import (
    EmbeddingProvider,
    ProfileNotFoundError,
    ProfileRepository,
)
from profile_matching.matching.rerank import mmr_rerank
from profile_matching.matching.resolver import ensure_vectors
from profile_matching.matching.scoring import MatchSettings, score_candidate
from profile_matching.matching.types import MatchCandidate, ProfileRecord, ProfileVectors

logger = logging.getLogger(__name__)

MAX_TOPK = 50


def clamp_topk(topk: int | None, default: int = 10) -> int:
    """Bound a requested result count to 1..MAX_TOPK, using ``default`` when unset or 0."""
    return max(1, min(MAX_TOPK, topk or default))


class MatchEngine:
    """Ranks other profiles against a query profile.

    The repository and embedding provider are injected so the engine can run
    against Dagster resources in production and in-memory fakes in tests.
    """

    def __init__(
        self,
        repository: ProfileRepository,
        embedder: EmbeddingProvider,
        settings: MatchSettings | None = None,
    ):
        self.repository = repository
        self.embedder = embedder
        self.settings = settings or MatchSettings()

    async def _resolve_all(self, profiles: list[ProfileRecord]) -> list[ProfileVectors]:
        semaphore = asyncio.Semaphore(max(1, self.settings.embed_concurrency))

        async def _resolve(profile: ProfileRecord) -> ProfileVectors:
            async with semaphore:
                return await ensure_vectors(profile, self.embedder, self.repository)

        return await asyncio.gather(*(_resolve(p) for p in profiles))

    async def get_matches(self, profile_id: str, topk: int | None = None) -> list[MatchCandidate]:
        """Return up to ``topk`` diversified matches for ``profile_id``.

        Raises:
            ProfileNotFoundError: If the query profile does not exist.
        """
        settings = self.settings
        topk = clamp_topk(topk, settings.topk)

        me = await asyncio.to_thread(self.repository.get_profile, profile_id)
        if me is None:
            raise ProfileNotFoundError(profile_id)

        me_vectors = await ensure_vectors(me, self.embedder, self.repository)

        candidates = await asyncio.to_thread(self.repository.list_other_profiles, profile_id)
        candidate_vectors = await self._resolve_all(candidates)

        scored = [
            score_candidate(me, me_vectors, candidate, vectors, settings)
            for candidate, vectors in zip(candidates, candidate_vectors)
        ]
        scored.sort(key=lambda c: c.score, reverse=True)

        results = mmr_rerank(scored[: settings.shortlist_size], settings.mmr_lambda, topk)
        logger.info(
            "Matched profile %s: %d candidates scored, %d returned",
            profile_id,
            len(scored),
            len(results),
        )
        return results
