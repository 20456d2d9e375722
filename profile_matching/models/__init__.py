"""SQLAlchemy models for the profile matching database."""

from profile_matching.models.base import Base
from profile_matching.models.llm_costs import LLMCost
from profile_matching.models.profiles import (
    VECTOR_DIMENSIONS,
    Profile,
    ProfileEducation,
    ProfileExperience,
)

__all__ = [
    "Base",
    "VECTOR_DIMENSIONS",
    "Profile",
    "ProfileEducation",
    "ProfileExperience",
    "LLMCost",
]
