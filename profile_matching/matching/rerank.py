"""Maximal Marginal Relevance (MMR) diversification.

Greedy selection that trades relevance for novelty: each pick maximizes

    lam * score - (1 - lam) * max_similarity_to_already_picked

lam close to 1 keeps the plain score order; lam close to 0 favours diversity.
Cost is O(k * n) cosine evaluations, so callers pass a pre-truncated shortlist.
"""

from collections.abc import Sequence

from profile_matching.matching.metrics import cosine
from profile_matching.matching.types import MatchCandidate


def mmr_rerank(
    scored: Sequence[MatchCandidate],
    lam: float = 0.8,
    topk: int = 10,
) -> list[MatchCandidate]:
    """Pick up to ``topk`` candidates from ``scored`` balancing relevance and diversity.

    Args:
        scored: Candidates, normally sorted by descending score. Not mutated.
        lam: Relevance weight in [0, 1].
        topk: Maximum number of picks.

    Returns:
        Picked candidates in selection order. Ties go to the earlier candidate.
    """
    picked: list[MatchCandidate] = []
    rest = list(scored)

    while rest and len(picked) < topk:
        best_index = 0
        best_value = float("-inf")

        for index, candidate in enumerate(rest):
            if not picked:
                value = candidate.score
            else:
                max_sim = max(
                    cosine(candidate.similarity_handle, p.similarity_handle) for p in picked
                )
                value = lam * candidate.score - (1 - lam) * max_sim

            if value > best_value:
                best_index = index
                best_value = value

        picked.append(rest.pop(best_index))

    return picked
