"""Dagster jobs for the profile matching pipeline.

Jobs available in the Dagster dashboard:

- extract_profile_tags_job: LLM keyword extraction for one profile (or free text),
  persisted to the profile's tag columns
- match_profile_job: rank and diversify matches for one profile
- profile_vectors_job: fill the vector cache for every profile that is missing one
- core_goal_counts_job: materialize the core goal tallies

USAGE:
Launch from the Launchpad with run config, e.g.

    ops:
      match_profile:
        config:
          profile_id: "6f1c..."
          topk: 10
"""

import asyncio

from dagster import (
    Backoff,
    Config,
    Failure,
    Jitter,
    MetadataValue,
    OpExecutionContext,
    RetryPolicy,
    define_asset_job,
    job,
    op,
)

from pydantic import Field

from profile_matching.assets.profiles import core_goal_counts
from profile_matching.llm.operations.extract_tags import (
    PROMPT_VERSION as TAGS_PROMPT_VERSION,
)
from profile_matching.llm.operations.extract_tags import (
    TagExtractionError,
    build_extract_payload,
    extract_profile_tags,
)
from profile_matching.matching.engine import MAX_TOPK, MatchEngine
from profile_matching.matching.repository import ProfileNotFoundError
from profile_matching.matching.resolver import ensure_vectors
from profile_matching.matching.scoring import MatchSettings

# Retry policy for OpenRouter calls (rate limits, transient errors)
# Exponential backoff: 1s, 2s, 4s between retries
openrouter_retry_policy = RetryPolicy(
    max_retries=3,
    delay=1,
    backoff=Backoff.EXPONENTIAL,
    jitter=Jitter.PLUS_MINUS,
)


class ExtractTagsConfig(Config):
    """Provide profile_id to extract from (and update) a stored profile, or text for a dry run."""

    profile_id: str | None = None
    text: str | None = None


class MatchProfileConfig(Config):
    """Run config for match_profile."""

    profile_id: str
    topk: int = 10
    mmr_lambda: float = Field(default=0.8, ge=0.0, le=1.0, description="1 = pure relevance")
    shortlist_size: int = Field(default=200, ge=1, description="Candidates passed to MMR")
    title_bonus: float = 0.02
    semantic_fit_threshold: float = 0.45
    embed_concurrency: int = Field(default=8, ge=1)

    def to_settings(self) -> MatchSettings:
        return MatchSettings(
            topk=self.topk,
            mmr_lambda=self.mmr_lambda,
            shortlist_size=self.shortlist_size,
            title_bonus=self.title_bonus,
            semantic_fit_threshold=self.semantic_fit_threshold,
            embed_concurrency=self.embed_concurrency,
        )


@op(
    name="extract_profile_tags",
    description="Extract normalized tags with the LLM and store them on the profile",
    required_resource_keys={"openrouter", "profile_store"},
    retry_policy=openrouter_retry_policy,
    tags={"dagster/concurrency_key": "openrouter_api"},
)
def extract_profile_tags_op(context: OpExecutionContext, config: ExtractTagsConfig) -> dict:
    if not config.profile_id and not config.text:
        raise Failure(description="Provide 'profile_id' or 'text'.", allow_retries=False)

    openrouter = context.resources.openrouter
    profile_store = context.resources.profile_store
    openrouter.set_context(
        run_id=context.run_id,
        step_key="extract_profile_tags",
        code_version=TAGS_PROMPT_VERSION,
    )

    if config.text:
        payload = build_extract_payload(text=config.text)
    else:
        try:
            payload = profile_store.get_extract_payload(config.profile_id)
        except ProfileNotFoundError as exc:
            raise Failure(description=str(exc), allow_retries=False) from exc

    try:
        result = asyncio.run(extract_profile_tags(openrouter, payload))
    except TagExtractionError as exc:
        raise Failure(description=str(exc)) from exc

    tags = result.tags.to_dict()
    if config.profile_id:
        try:
            profile_store.update_tags(config.profile_id, result.tags)
        except Exception as exc:
            context.log.warning(f"Failed to store tags for {config.profile_id}: {exc}")

    context.add_output_metadata(
        {
            "profile_id": config.profile_id or "",
            "tags": MetadataValue.json(tags),
            "relaxed_parse": result.relaxed,
            "llm_cost_usd": result.cost_usd,
            "llm_input_tokens": result.input_tokens,
            "llm_output_tokens": result.output_tokens,
            "prompt_version": result.prompt_version,
        }
    )
    return {"id": config.profile_id, "tags": tags}


@op(
    description="Rank other profiles for one profile: directional score + MMR diversity",
    required_resource_keys={"profile_store", "embeddings"},
    tags={"dagster/concurrency_key": "openrouter_api"},
)
def match_profile(context: OpExecutionContext, config: MatchProfileConfig) -> dict:
    if not 1 <= config.topk <= MAX_TOPK:
        context.log.warning(f"topk={config.topk} outside 1..{MAX_TOPK}; clamping")

    context.resources.embeddings.openrouter.set_context(
        run_id=context.run_id, step_key="match_profile"
    )
    engine = MatchEngine(
        repository=context.resources.profile_store,
        embedder=context.resources.embeddings,
        settings=config.to_settings(),
    )
    try:
        matches = asyncio.run(engine.get_matches(config.profile_id, config.topk))
    except ProfileNotFoundError as exc:
        raise Failure(description=str(exc), allow_retries=False) from exc

    results = [m.to_dict() for m in matches]
    context.add_output_metadata(
        {
            "query": config.profile_id,
            "results_count": len(results),
            "top_score": results[0]["score"] if results else 0.0,
            "results": MetadataValue.json(results),
        }
    )
    return {"query": config.profile_id, "results": results}


@op(
    description="Compute and cache missing offering/looking vectors for every profile",
    required_resource_keys={"profile_store", "embeddings"},
    tags={"dagster/concurrency_key": "openrouter_api"},
)
def fill_profile_vectors(context: OpExecutionContext) -> int:
    profile_store = context.resources.profile_store
    embeddings = context.resources.embeddings
    embeddings.openrouter.set_context(run_id=context.run_id, step_key="fill_profile_vectors")

    profiles = profile_store.list_profiles()
    missing = [
        p
        for p in profiles
        if (p.tags.offering and not p.offering_vec) or (p.tags.looking_for and not p.looking_vec)
    ]
    context.log.info(f"{len(missing)} of {len(profiles)} profiles need vectors")

    async def _fill() -> None:
        for profile in missing:
            await ensure_vectors(profile, embeddings, profile_store)

    asyncio.run(_fill())
    context.add_output_metadata({"profiles": len(profiles), "filled": len(missing)})
    return len(missing)


@job(description="Extract and store tags for one profile (or free text)")
def extract_profile_tags_job():
    extract_profile_tags_op()


@job(description="Compute diversified matches for one profile")
def match_profile_job():
    match_profile()


@job(description="Warm the vector cache for all profiles")
def profile_vectors_job():
    fill_profile_vectors()


core_goal_counts_job = define_asset_job(
    name="core_goal_counts_job",
    description="Recompute core goal tallies across all profiles",
    selection=[core_goal_counts],
)
