"""Matching engine: tag normalization, vectors, directional scoring and MMR reranking."""

from profile_matching.matching.engine import MatchEngine
from profile_matching.matching.goals import tally_core_goals
from profile_matching.matching.metrics import cosine, jaccard
from profile_matching.matching.repository import (
    EmbeddingProvider,
    ProfileNotFoundError,
    ProfileRepository,
)
from profile_matching.matching.rerank import mmr_rerank
from profile_matching.matching.resolver import ensure_vectors
from profile_matching.matching.scoring import MatchSettings, build_reasons, pair_score
from profile_matching.matching.tags import ensure_tags_shape, normalize_tag_list, overlap
from profile_matching.matching.types import MatchCandidate, ProfileRecord, ProfileVectors, TagSet
from profile_matching.matching.vectors import EMBED_DIM, hash_embed_one, l2norm, mean_vec

__all__ = [
    "MatchEngine",
    "MatchSettings",
    "ProfileNotFoundError",
    "ProfileRepository",
    "EmbeddingProvider",
    # Data shapes
    "TagSet",
    "ProfileRecord",
    "ProfileVectors",
    "MatchCandidate",
    # Stages
    "normalize_tag_list",
    "ensure_tags_shape",
    "overlap",
    "EMBED_DIM",
    "l2norm",
    "hash_embed_one",
    "mean_vec",
    "ensure_vectors",
    "cosine",
    "jaccard",
    "pair_score",
    "build_reasons",
    "mmr_rerank",
    "tally_core_goals",
]
