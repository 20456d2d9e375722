"""Vector helpers and the deterministic offline embedding.

The hash embedding keeps matching functional when the remote embedding
service is unreachable. It is a bag of character n-grams hashed into
EMBED_DIM buckets: reproducible and dependency-free, not semantic.
"""

import math
from collections.abc import Sequence
from typing import Any

from profile_matching.matching.tags import parse_json

EMBED_DIM = 768

_NGRAM_SIZES = (3, 4, 5)
_HASH_BASE_1 = 131
_HASH_BASE_2 = 137
_UINT32 = 0xFFFFFFFF


def l2norm(vector: Sequence[float]) -> list[float]:
    """Return ``vector`` scaled to unit length. The zero vector maps to itself."""
    norm = math.sqrt(sum(x * x for x in vector)) or 1.0
    return [x / norm for x in vector]


def hash_embed_one(text: str | None) -> list[float]:
    """Embed ``text`` by hashing its 3-5 character n-grams into EMBED_DIM buckets."""
    counts = [0.0] * EMBED_DIM
    lowered = (text or "").lower()

    for n in _NGRAM_SIZES:
        for start in range(len(lowered) - n + 1):
            h1 = 0
            h2 = 0
            for ch in lowered[start : start + n]:
                code = ord(ch)
                h1 = (h1 * _HASH_BASE_1 + code) & _UINT32
                h2 = (h2 * _HASH_BASE_2 + code) & _UINT32
            counts[(h1 + h2) % EMBED_DIM] += 1

    return l2norm(counts)


def hash_embed_batch(texts: Sequence[str]) -> list[list[float]]:
    return [hash_embed_one(text) for text in texts]


def mean_vec(vectors: Sequence[Sequence[float] | None]) -> list[float]:
    """Elementwise mean of ``vectors`` over EMBED_DIM slots, renormalized.

    Missing vectors and missing trailing components count as zeros. An empty
    input yields the zero vector.
    """
    out = [0.0] * EMBED_DIM
    if not vectors:
        return out

    for vector in vectors:
        if not vector:
            continue
        for i, x in enumerate(vector[:EMBED_DIM]):
            out[i] += x or 0.0

    count = len(vectors)
    return l2norm([x / count for x in out])


def coerce_vector(value: Any) -> list[float]:
    """Read a stored vector (pgvector array, JSON text, list, or garbage) as a list of floats.

    Anything unusable, including a partially numeric list, is treated as missing.
    """
    if value is None:
        return []
    if hasattr(value, "tolist"):
        value = value.tolist()
    parsed = parse_json(value, None)
    if not isinstance(parsed, list):
        return []
    if not all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in parsed):
        return []
    return [float(x) for x in parsed]
