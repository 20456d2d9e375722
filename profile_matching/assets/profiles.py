"""Profile-level assets.

- core_goal_counts: how many profiles look for / offer each core goal
  (hiring, networking, investment, entertainment, learning)
"""

from typing import Any

from dagster import AssetExecutionContext, MetadataValue, Output, asset

from profile_matching.matching.goals import tally_core_goals


@asset(
    description="Unique profiles per core goal, split by looking_for and offering",
    group_name="profiles",
    required_resource_keys={"profile_store"},
    code_version="1.0.0",
)
def core_goal_counts(context: AssetExecutionContext) -> Output[dict[str, Any]]:
    profiles = context.resources.profile_store.list_profiles()
    counts = tally_core_goals(profiles)
    context.log.info(f"Tallied core goals across {len(profiles)} profiles")
    return Output(
        counts,
        metadata={
            "profiles": len(profiles),
            "looking": MetadataValue.json(counts["looking"]),
            "offering": MetadataValue.json(counts["offering"]),
        },
    )
