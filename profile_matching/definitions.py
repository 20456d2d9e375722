"""Dagster definitions for the Profile Matching system.

This module is the entry point for Dagster. It wires together:
- Assets (core goal counts)
- Resources (OpenRouter for LLM + embeddings, embedding fallback, profile store)
- Jobs (tag extraction, matching, vector cache warm-up)
"""

import os

from dagster import Definitions, load_assets_from_modules
from dotenv import load_dotenv

from profile_matching.assets import profiles
from profile_matching.jobs import (
    core_goal_counts_job,
    extract_profile_tags_job,
    match_profile_job,
    profile_vectors_job,
)
from profile_matching.resources import (
    EmbeddingResource,
    OpenRouterResource,
    ProfileStoreResource,
)

# Load environment variables from .env file (must be before resource initialization)
load_dotenv()

all_assets = load_assets_from_modules([profiles])


def get_environment() -> str:
    """Get current environment from env var."""
    return os.getenv("ENVIRONMENT", "development")


def get_resources() -> dict:
    """Build resources. Development runs on hash embeddings unless a key is set."""
    openrouter = OpenRouterResource(
        api_key=os.getenv("OPENROUTER_API_KEY", ""),
        default_model=os.getenv("OPENROUTER_MODEL", "openai/gpt-4o-mini"),
    )
    return {
        "openrouter": openrouter,
        "embeddings": EmbeddingResource(
            openrouter=openrouter,
            remote_enabled=os.getenv("EMBEDDINGS_REMOTE", "true").lower() != "false",
        ),
        "profile_store": ProfileStoreResource(),
    }


all_jobs = [
    extract_profile_tags_job,
    match_profile_job,
    profile_vectors_job,
    core_goal_counts_job,
]

defs = Definitions(
    assets=all_assets,
    resources=get_resources(),
    jobs=all_jobs,
)


def main():
    """Entry point for CLI usage."""
    print("Profile Matching Dagster project loaded successfully!")
    print(f"Environment: {get_environment()}")
    print(f"Assets: {len(all_assets)}")
    print(f"Jobs: {len(all_jobs)}")
    print("\nAvailable jobs:")
    for job in all_jobs:
        print(f"  - {job.name}")
    print("\nRun 'dagster dev' to start the development server.")


if __name__ == "__main__":
    main()
