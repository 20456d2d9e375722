"""Profile store resource: the SQL-backed repository the matching engine reads and writes."""

import logging
from collections.abc import Sequence
from typing import Any
from uuid import UUID

from dagster import ConfigurableResource
from sqlalchemy import select, update

from profile_matching.db import session_scope
from profile_matching.llm.operations.extract_tags import (
    MAX_EDUCATION_ROWS,
    MAX_EXPERIENCE_ROWS,
    build_extract_payload,
)
from profile_matching.matching.repository import ProfileNotFoundError
from profile_matching.matching.tags import coerce_tag_list
from profile_matching.matching.types import ProfileRecord, TagSet
from profile_matching.matching.vectors import coerce_vector
from profile_matching.models.profiles import Profile, ProfileEducation, ProfileExperience

logger = logging.getLogger(__name__)


def _to_uuid(profile_id: Any) -> UUID | None:
    if isinstance(profile_id, UUID):
        return profile_id
    try:
        return UUID(str(profile_id))
    except (TypeError, ValueError):
        return None


def profile_from_row(row: Any) -> ProfileRecord:
    """Convert a Profile row into a ProfileRecord, treating unusable columns as empty."""
    return ProfileRecord(
        id=str(row.id) if row.id is not None else None,
        name=row.name,
        headline=row.headline,
        tags=TagSet(
            title=coerce_tag_list(row.title_tags),
            company=coerce_tag_list(row.company_tags),
            looking_for=coerce_tag_list(row.looking_tags),
            offering=coerce_tag_list(row.offering_tags),
        ),
        offering_vec=coerce_vector(row.offering_vec),
        looking_vec=coerce_vector(row.looking_vec),
    )


class ProfileStoreResource(ConfigurableResource):
    """Reads profiles and writes back tags and cached vectors.

    Implements the ProfileRepository protocol used by MatchEngine.
    """

    def get_profile(self, profile_id: str) -> ProfileRecord | None:
        """Load one profile, or None if the id is unknown or not a UUID."""
        uid = _to_uuid(profile_id)
        if uid is None:
            return None
        with session_scope() as session:
            row = session.get(Profile, uid)
            return profile_from_row(row) if row is not None else None

    def list_other_profiles(self, exclude_id: str) -> list[ProfileRecord]:
        """Load every profile except ``exclude_id``."""
        stmt = select(Profile)
        uid = _to_uuid(exclude_id)
        if uid is not None:
            stmt = stmt.where(Profile.id != uid)
        with session_scope() as session:
            return [profile_from_row(row) for row in session.execute(stmt).scalars().all()]

    def list_profiles(self) -> list[ProfileRecord]:
        with session_scope() as session:
            rows = session.execute(select(Profile)).scalars().all()
            return [profile_from_row(row) for row in rows]

    def update_tags(self, profile_id: str, tags: TagSet) -> None:
        """Overwrite the four tag columns of a profile."""
        uid = _to_uuid(profile_id)
        if uid is None:
            raise ProfileNotFoundError(profile_id)
        with session_scope() as session:
            session.execute(
                update(Profile)
                .where(Profile.id == uid)
                .values(
                    title_tags=tags.title,
                    company_tags=tags.company,
                    looking_tags=tags.looking_for,
                    offering_tags=tags.offering,
                )
            )

    def update_vectors(
        self,
        profile_id: str,
        offering_vec: Sequence[float],
        looking_vec: Sequence[float],
    ) -> None:
        """Write both cached vectors in one statement. Empty vectors are stored as NULL."""
        uid = _to_uuid(profile_id)
        if uid is None:
            raise ProfileNotFoundError(profile_id)
        with session_scope() as session:
            session.execute(
                update(Profile)
                .where(Profile.id == uid)
                .values(
                    offering_vec=list(offering_vec) or None,
                    looking_vec=list(looking_vec) or None,
                )
            )
        logger.debug("Stored vectors for profile %s", profile_id)

    def get_extract_payload(self, profile_id: str) -> dict[str, Any]:
        """Build the keyword-extraction payload from a profile and its education/experience.

        Raises:
            ProfileNotFoundError: If the profile does not exist.
        """
        uid = _to_uuid(profile_id)
        if uid is None:
            raise ProfileNotFoundError(profile_id)

        with session_scope() as session:
            profile = session.get(Profile, uid)
            if profile is None:
                raise ProfileNotFoundError(profile_id)

            education = session.execute(
                select(ProfileEducation.title, ProfileEducation.degree, ProfileEducation.duration)
                .where(ProfileEducation.profile_id == uid)
                .limit(MAX_EDUCATION_ROWS)
            ).all()
            experience = session.execute(
                select(
                    ProfileExperience.title,
                    ProfileExperience.company,
                    ProfileExperience.duration,
                    ProfileExperience.description,
                )
                .where(ProfileExperience.profile_id == uid)
                .limit(MAX_EXPERIENCE_ROWS)
            ).all()

            return build_extract_payload(
                headline=profile.headline,
                about=profile.about,
                education=[row._asdict() for row in education],
                experience=[row._asdict() for row in experience],
            )
