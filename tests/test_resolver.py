"""Tests for lazy vector resolution and write-back."""

import asyncio
import logging

import pytest
from conftest import FakeEmbedder, FakeRepository, make_profile, unit

from profile_matching.matching.resolver import ensure_vectors
from profile_matching.matching.vectors import hash_embed_one, mean_vec


class TestEnsureVectors:
    """Tests for ensure_vectors."""

    def test_cached_vectors_are_returned_without_embedding(self, embedder):
        """Test that stored vectors are trusted."""
        profile = make_profile(
            "a", offering=["python"], looking_for=["funding"],
            offering_vec=unit(0), looking_vec=unit(1),
        )
        repository = FakeRepository([profile])
        vectors = asyncio.run(ensure_vectors(profile, embedder, repository))
        assert vectors.offering_vec == unit(0)
        assert vectors.looking_vec == unit(1)
        assert embedder.calls == []
        assert repository.vector_updates == []

    def test_missing_side_is_computed_from_prefixed_tags(self, embedder):
        """Test that each tag is embedded with its slot prefix and averaged."""
        profile = make_profile("a", offering=["python", "design"], looking_vec=unit(1))
        repository = FakeRepository([profile])
        vectors = asyncio.run(ensure_vectors(profile, embedder, repository))

        assert embedder.calls == [["offering: python", "offering: design"]]
        expected = mean_vec(
            [hash_embed_one("offering: python"), hash_embed_one("offering: design")]
        )
        assert vectors.offering_vec == pytest.approx(expected)
        assert vectors.looking_vec == unit(1)

    def test_computed_vectors_are_written_back_once(self, embedder):
        """Test a single update containing both sides."""
        profile = make_profile("a", offering=["python"], looking_for=["funding"])
        repository = FakeRepository([profile])
        vectors = asyncio.run(ensure_vectors(profile, embedder, repository))

        assert len(repository.vector_updates) == 1
        profile_id, offering_vec, looking_vec = repository.vector_updates[0]
        assert profile_id == "a"
        assert offering_vec == vectors.offering_vec
        assert looking_vec == vectors.looking_vec
        assert embedder.calls == [["offering: python"], ["looking: funding"]]

    def test_second_call_hits_cache(self, embedder):
        """Test that written-back vectors are reused."""
        profile = make_profile("a", offering=["python"])
        repository = FakeRepository([profile])
        first = asyncio.run(ensure_vectors(profile, embedder, repository))
        second = asyncio.run(ensure_vectors(repository.get_profile("a"), embedder, repository))
        assert first == second
        assert len(embedder.calls) == 1

    def test_no_tags_gives_empty_vectors_and_no_write(self, embedder):
        """Test that an untagged side stays empty."""
        profile = make_profile("a")
        repository = FakeRepository([profile])
        vectors = asyncio.run(ensure_vectors(profile, embedder, repository))
        assert vectors.offering_vec == []
        assert vectors.looking_vec == []
        assert embedder.calls == []
        assert repository.vector_updates == []

    def test_write_failure_is_logged_not_raised(self, embedder, caplog):
        """Test that persistence errors do not affect the result."""
        profile = make_profile("a", offering=["python"])
        repository = FakeRepository([profile])
        repository.fail_writes = True

        with caplog.at_level(logging.WARNING, logger="profile_matching.matching.resolver"):
            vectors = asyncio.run(ensure_vectors(profile, embedder, repository))

        assert vectors.offering_vec
        assert "Failed to persist vectors for profile a" in caplog.text

    def test_without_repository_or_id_nothing_is_written(self):
        """Test that anonymous or repository-less resolution skips write-back."""
        embedder = FakeEmbedder({"offering: python": unit(3)})
        profile = make_profile(None, offering=["python"])
        vectors = asyncio.run(ensure_vectors(profile, embedder))
        assert vectors.offering_vec == pytest.approx(unit(3))

        repository = FakeRepository()
        asyncio.run(ensure_vectors(profile, embedder, repository))
        assert repository.vector_updates == []
