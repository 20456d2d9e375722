"""Tests for the Dagster ops and the core goal asset, invoked directly with fakes."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from conftest import FakeEmbedder, FakeRepository, make_profile, unit
from dagster import Failure, build_asset_context, build_op_context
from pydantic import ValidationError

from profile_matching.assets.profiles import core_goal_counts
from profile_matching.jobs import (
    ExtractTagsConfig,
    MatchProfileConfig,
    extract_profile_tags_op,
    fill_profile_vectors,
    match_profile,
)
from profile_matching.llm.operations.extract_tags import ExtractTagsResult
from profile_matching.matching.types import TagSet


class StubOpenRouter:
    """Stands in for OpenRouterResource where only cost attribution is touched."""

    def __init__(self):
        self.contexts = []

    def set_context(self, run_id, step_key, code_version=""):
        self.contexts.append(step_key)


def _embeddings():
    embedder = FakeEmbedder()
    embedder.openrouter = StubOpenRouter()
    return embedder


def _profiles():
    return [
        make_profile(
            "alice", looking_for=["funding"], offering=["engineering"],
            looking_vec=unit(0), offering_vec=unit(1),
        ),
        make_profile(
            "bob", looking_for=["engineering"], offering=["funding"],
            offering_vec=unit(0), looking_vec=unit(1),
        ),
        make_profile("carol", looking_for=["hiring"]),
    ]


class TestMatchProfileOp:
    """Tests for the match_profile op."""

    def test_returns_ranked_results(self):
        """Test the JSON-ready output of the op."""
        context = build_op_context(
            resources={"profile_store": FakeRepository(_profiles()), "embeddings": _embeddings()}
        )
        output = match_profile(context, config=MatchProfileConfig(profile_id="alice", topk=5))
        assert output["query"] == "alice"
        assert output["results"][0]["id"] == "bob"
        assert output["results"][0]["reasons"][0] == "matches what you're seeking: funding"
        assert set(output["results"][0]) == {"id", "name", "headline", "score", "reasons"}

    def test_unknown_profile_fails(self):
        """Test that a missing query profile fails the op."""
        context = build_op_context(
            resources={"profile_store": FakeRepository(_profiles()), "embeddings": _embeddings()}
        )
        with pytest.raises(Failure):
            match_profile(context, config=MatchProfileConfig(profile_id="nobody"))

    @pytest.mark.parametrize(
        "overrides", [{"mmr_lambda": 1.5}, {"mmr_lambda": -0.1}, {"shortlist_size": 0}]
    )
    def test_config_rejects_out_of_range_knobs(self, overrides):
        """Test that run config bounds the MMR weight and the shortlist size."""
        with pytest.raises(ValidationError):
            MatchProfileConfig(profile_id="alice", **overrides)


class TestExtractProfileTagsOp:
    """Tests for the extract_profile_tags op."""

    def test_requires_profile_id_or_text(self):
        """Test the input check."""
        context = build_op_context(
            resources={"openrouter": StubOpenRouter(), "profile_store": FakeRepository()}
        )
        with pytest.raises(Failure):
            extract_profile_tags_op(context, config=ExtractTagsConfig())

    def test_stores_tags_for_profile(self):
        """Test that extracted tags are written back to the profile."""
        repository = FakeRepository(_profiles())
        repository.get_extract_payload = MagicMock(return_value={"about": "x"})
        tags = TagSet(title=["engineer"], looking_for=["funding"])
        result = ExtractTagsResult(tags, {}, "m", "1.0.0")
        context = build_op_context(
            resources={"openrouter": StubOpenRouter(), "profile_store": repository}
        )
        with patch(
            "profile_matching.jobs.extract_profile_tags",
            new=AsyncMock(return_value=result),
        ):
            output = extract_profile_tags_op(context, config=ExtractTagsConfig(profile_id="alice"))

        assert output["tags"]["title"] == ["engineer"]
        assert repository.tag_updates == [("alice", tags)]


class TestFillProfileVectorsOp:
    """Tests for the vector cache warm-up op."""

    def test_fills_only_missing_vectors(self):
        """Test that only profiles lacking a vector for a tagged side are embedded."""
        repository = FakeRepository(_profiles())
        context = build_op_context(
            resources={"profile_store": repository, "embeddings": _embeddings()}
        )
        assert fill_profile_vectors(context) == 1
        assert [update[0] for update in repository.vector_updates] == ["carol"]


class TestCoreGoalCountsAsset:
    """Tests for the core_goal_counts asset."""

    def test_counts_profiles(self):
        """Test the tally over the profile store."""
        context = build_asset_context(resources={"profile_store": FakeRepository(_profiles())})
        output = core_goal_counts(context)
        assert output.value["looking"]["investment"] == 1
        assert output.value["looking"]["hiring"] == 1
        assert output.value["offering"]["investment"] == 1
