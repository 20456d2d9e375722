"""Tests for vector helpers and the deterministic hash embedding."""

import math

import pytest

from profile_matching.matching.vectors import (
    EMBED_DIM,
    coerce_vector,
    hash_embed_one,
    l2norm,
    mean_vec,
)


def _norm(vector):
    return math.sqrt(sum(x * x for x in vector))


class TestL2Norm:
    """Tests for l2norm."""

    def test_scales_to_unit_length(self):
        """Test a simple 3-4-5 vector."""
        assert l2norm([3.0, 4.0]) == pytest.approx([0.6, 0.8])

    def test_non_zero_vectors_have_unit_norm(self):
        """Test unit norm for assorted vectors."""
        for vector in ([1.0], [-2.0, 5.0, 0.5], [1e-6, 1e-6], [7.0] * 10):
            assert _norm(l2norm(vector)) == pytest.approx(1.0)

    def test_zero_vector_maps_to_itself(self):
        """Test that the zero vector is left unchanged."""
        assert l2norm([0.0, 0.0, 0.0]) == [0.0, 0.0, 0.0]

    def test_does_not_mutate_input(self):
        """Test that a new list is returned."""
        vector = [3.0, 4.0]
        l2norm(vector)
        assert vector == [3.0, 4.0]


class TestHashEmbedOne:
    """Tests for the n-gram hash embedding."""

    def test_dimensions_and_unit_norm(self):
        """Test the output shape."""
        vector = hash_embed_one("offering: machine learning")
        assert len(vector) == EMBED_DIM
        assert _norm(vector) == pytest.approx(1.0)

    def test_reproducible(self):
        """Test that identical text gives a bit-identical vector."""
        assert hash_embed_one("looking: funding") == hash_embed_one("looking: funding")

    def test_case_insensitive(self):
        """Test that text is lowercased before hashing."""
        assert hash_embed_one("Funding") == hash_embed_one("funding")

    def test_distinct_texts_differ(self):
        """Test that different short texts land in different buckets."""
        texts = ["funding", "hiring", "python", "design", "music"]
        vectors = [tuple(hash_embed_one(t)) for t in texts]
        assert len(set(vectors)) == len(texts)

    def test_single_trigram_bucket(self):
        """Test the bucket for 'abc': (h131 + h137) mod 768 == 376."""
        vector = hash_embed_one("abc")
        assert vector[376] == 1.0
        assert sum(vector) == 1.0

    def test_text_shorter_than_three_chars_is_zero(self):
        """Test that no n-grams gives the zero vector."""
        assert hash_embed_one("ab") == [0.0] * EMBED_DIM
        assert hash_embed_one(None) == [0.0] * EMBED_DIM


class TestMeanVec:
    """Tests for mean_vec."""

    def test_empty_input_is_zero_vector(self):
        """Test the empty case."""
        assert mean_vec([]) == [0.0] * EMBED_DIM

    def test_mean_is_renormalized(self):
        """Test that the mean of two orthogonal unit vectors has unit norm."""
        a = [1.0] + [0.0] * (EMBED_DIM - 1)
        b = [0.0, 1.0] + [0.0] * (EMBED_DIM - 2)
        result = mean_vec([a, b])
        assert result[0] == pytest.approx(1 / math.sqrt(2))
        assert result[1] == pytest.approx(1 / math.sqrt(2))
        assert _norm(result) == pytest.approx(1.0)

    def test_missing_vector_counts_as_zero(self):
        """Test that an empty slot contributes nothing but still renormalizes."""
        a = [0.0, 2.0] + [0.0] * (EMBED_DIM - 2)
        assert mean_vec([a, []]) == pytest.approx(l2norm(a))
        assert mean_vec([a, None]) == pytest.approx(l2norm(a))

    def test_short_vectors_pad_with_zeros(self):
        """Test that output always has EMBED_DIM components."""
        result = mean_vec([[1.0, 1.0]])
        assert len(result) == EMBED_DIM
        assert result[0] == pytest.approx(1 / math.sqrt(2))


class TestCoerceVector:
    """Tests for reading stored vectors."""

    def test_absent_and_garbage_are_empty(self):
        """Test that unusable values become []."""
        assert coerce_vector(None) == []
        assert coerce_vector("not json") == []
        assert coerce_vector('{"a": 1}') == []
        assert coerce_vector([1.0, "x"]) == []
        assert coerce_vector([True, 1.0]) == []

    def test_json_text_and_lists(self):
        """Test decoding of JSON text and plain lists."""
        assert coerce_vector("[1, 2.5]") == [1.0, 2.5]
        assert coerce_vector([0.5, 0.5]) == [0.5, 0.5]

    def test_array_like_values(self):
        """Test objects exposing tolist(), like pgvector's numpy arrays."""

        class ArrayLike:
            def tolist(self):
                return [0.25, 0.75]

        assert coerce_vector(ArrayLike()) == [0.25, 0.75]
