"""Directional pair scoring and match explanations.

A match is good when each side wants what the other offers:

- cos1 = cosine(query.looking_vec, candidate.offering_vec)  "do I want what they offer"
- cos2 = cosine(candidate.looking_vec, query.offering_vec)  "do they want what I offer"

The two directions are combined with a harmonic mean so one-sided enthusiasm
scores low. Tag overlap (Jaccard) is a secondary nudge that saturates quickly.
"""

from dataclasses import dataclass

from profile_matching.matching.metrics import cosine, jaccard
from profile_matching.matching.tags import overlap
from profile_matching.matching.types import MatchCandidate, ProfileRecord, ProfileVectors
from profile_matching.matching.vectors import mean_vec

# Blend weights: 85% embedding signal, 15% tag-overlap boost
HARMONIC_WEIGHT = 0.85
JACCARD_WEIGHT = 0.15
# Average Jaccard at or above this value gives the full boost
JACCARD_SATURATION = 0.2
# Fraction of the stronger direction kept when the harmonic mean is gated to 0
ONE_WAY_FLOOR = 0.05


@dataclass(frozen=True)
class MatchSettings:
    """Tunable knobs for one matching run."""

    topk: int = 10
    mmr_lambda: float = 0.8
    shortlist_size: int = 200
    # Added to the score when the two profiles share a title tag
    title_bonus: float = 0.02
    # Either cosine above this yields a "strong semantic fit" reason when nothing else fired
    semantic_fit_threshold: float = 0.45
    embed_concurrency: int = 8

    def __post_init__(self):
        if not 0.0 <= self.mmr_lambda <= 1.0:
            raise ValueError(f"mmr_lambda must be within [0, 1], got {self.mmr_lambda}")
        if self.shortlist_size < 1:
            raise ValueError(f"shortlist_size must be at least 1, got {self.shortlist_size}")
        if self.embed_concurrency < 1:
            raise ValueError(f"embed_concurrency must be at least 1, got {self.embed_concurrency}")


def pair_score(cos1: float, cos2: float, j1: float, j2: float) -> float:
    """Combine directional cosines and Jaccard overlaps into one compatibility score."""
    if cos1 > 0 and cos2 > 0:
        harmonic = 2 * cos1 * cos2 / (cos1 + cos2)
    else:
        harmonic = 0.0
    harmonic = max(harmonic, ONE_WAY_FLOOR * max(cos1, cos2))

    j_avg = (j1 + j2) / 2
    j_boost = min(JACCARD_SATURATION, max(0.0, j_avg)) / JACCARD_SATURATION

    return HARMONIC_WEIGHT * harmonic + JACCARD_WEIGHT * j_boost


def build_reasons(
    query: ProfileRecord,
    candidate: ProfileRecord,
    cos1: float,
    cos2: float,
    j1: float,
    j2: float,
    semantic_fit_threshold: float = 0.45,
) -> list[str]:
    """Human-readable reasons for a match, most specific first.

    Reasons are advisory and do not feed back into the score.
    """
    q, c = query.tags, candidate.tags
    reasons: list[str] = []

    seeking = overlap(q.looking_for, c.offering)
    if seeking:
        reasons.append(f"matches what you're seeking: {', '.join(seeking[:3])}")

    they_need = overlap(c.looking_for, q.offering)
    if they_need:
        reasons.append(f"you can help them with: {', '.join(they_need[:3])}")

    mutual_topics = overlap(q.offering, c.offering)
    if mutual_topics:
        reasons.append(f"shared topics: {', '.join(mutual_topics[:3])}")

    shared_titles = overlap(q.title, c.title)
    if shared_titles:
        reasons.append(f"similar roles: {', '.join(shared_titles[:2])}")

    shared_companies = overlap(q.company, c.company)
    if shared_companies:
        reasons.append(f"shared orgs: {', '.join(shared_companies[:2])}")

    if not reasons and (j1 > 0 or j2 > 0):
        reasons.append("overlapping tags (need/offer)")

    if not reasons and (cos1 > semantic_fit_threshold or cos2 > semantic_fit_threshold):
        which = (
            "their offering ~ your needs" if cos1 >= cos2 else "your offering ~ their needs"
        )
        reasons.append(f"strong semantic fit ({which}: {max(cos1, cos2):.2f})")

    return reasons


def score_candidate(
    query: ProfileRecord,
    query_vectors: ProfileVectors,
    candidate: ProfileRecord,
    candidate_vectors: ProfileVectors,
    settings: MatchSettings = MatchSettings(),
) -> MatchCandidate:
    """Score one candidate against the query and attach its reasons and similarity handle."""
    q_need, q_offer = query_vectors.looking_vec, query_vectors.offering_vec
    c_need, c_offer = candidate_vectors.looking_vec, candidate_vectors.offering_vec

    cos1 = cosine(q_need, c_offer) if q_need and c_offer else 0.0
    cos2 = cosine(c_need, q_offer) if c_need and q_offer else 0.0

    j1 = jaccard(query.tags.looking_for, candidate.tags.offering)
    j2 = jaccard(candidate.tags.looking_for, query.tags.offering)

    score = pair_score(cos1, cos2, j1, j2)
    if overlap(query.tags.title, candidate.tags.title):
        score += settings.title_bonus

    return MatchCandidate(
        id=candidate.id,
        name=candidate.name,
        headline=candidate.headline,
        score=score,
        similarity_handle=mean_vec([c_offer, c_need]),
        reasons=build_reasons(
            query,
            candidate,
            cos1,
            cos2,
            j1,
            j2,
            semantic_fit_threshold=settings.semantic_fit_threshold,
        ),
    )
