"""Dagster resources for the profile matching pipeline."""

from profile_matching.resources.embeddings import EmbeddingResource
from profile_matching.resources.openrouter import OpenRouterResource
from profile_matching.resources.profiles import ProfileStoreResource

__all__ = [
    "EmbeddingResource",
    "OpenRouterResource",
    "ProfileStoreResource",
]
