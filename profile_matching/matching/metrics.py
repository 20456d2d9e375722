"""Similarity primitives used by the scorer and the MMR reranker."""

import math
from collections.abc import Iterable, Sequence


def _dot(a: Sequence[float], b: Sequence[float]) -> float:
    # zip stops at the shorter vector: unequal lengths compare over the shared prefix
    return sum((x or 0.0) * (y or 0.0) for x, y in zip(a, b))


def _norm(a: Sequence[float]) -> float:
    return math.sqrt(_dot(a, a)) or 1.0


def cosine(a: Sequence[float] | None, b: Sequence[float] | None) -> float:
    """Cosine similarity in [-1, 1]. Zero or empty vectors give 0."""
    a = a or []
    b = b or []
    return _dot(a, b) / (_norm(a) * _norm(b))


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    """|A ∩ B| / |A ∪ B| over the inputs as sets; 0 when both are empty."""
    set_a = set(a)
    set_b = set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)
