"""Dagster assets for the profile matching pipeline."""

from profile_matching.assets import profiles

__all__ = ["profiles"]
