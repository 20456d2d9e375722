"""Profile models: the records the matching engine reads and caches vectors on."""

from datetime import datetime
from uuid import uuid4

from pgvector.sqlalchemy import Vector
from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from profile_matching.models.base import Base

# Must match matching.vectors.EMBED_DIM
VECTOR_DIMENSIONS = 768


class Profile(Base):
    """A person's profile with normalized tags and cached embeddings.

    Tag columns hold normalized phrases (lowercase, 1-3 words, <= 12 per slot).
    offering_vec / looking_vec are derived from the tags and filled lazily by
    the matching engine; NULL means "not computed yet".
    """

    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid4)

    # Display fields
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    headline: Mapped[str | None] = mapped_column(String(500), nullable=True)
    about: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Normalized tag slots
    title_tags: Mapped[list[str]] = mapped_column(ARRAY(String(40)), nullable=False, default=list)
    company_tags: Mapped[list[str]] = mapped_column(
        ARRAY(String(40)), nullable=False, default=list
    )
    looking_tags: Mapped[list[str]] = mapped_column(
        ARRAY(String(40)), nullable=False, default=list
    )
    offering_tags: Mapped[list[str]] = mapped_column(
        ARRAY(String(40)), nullable=False, default=list
    )

    # Cached embeddings (mean of per-tag vectors, unit length)
    offering_vec: Mapped[list[float] | None] = mapped_column(
        Vector(VECTOR_DIMENSIONS), nullable=True
    )
    looking_vec: Mapped[list[float] | None] = mapped_column(
        Vector(VECTOR_DIMENSIONS), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    education: Mapped[list["ProfileEducation"]] = relationship(
        back_populates="profile", cascade="all, delete-orphan"
    )
    experience: Mapped[list["ProfileExperience"]] = relationship(
        back_populates="profile", cascade="all, delete-orphan"
    )


class ProfileEducation(Base):
    """Education entry, used only as keyword-extraction input."""

    __tablename__ = "profile_education"

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    profile_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)  # school name
    degree: Mapped[str | None] = mapped_column(String(255), nullable=True)
    duration: Mapped[str | None] = mapped_column(String(100), nullable=True)

    profile: Mapped[Profile] = relationship(back_populates="education")


class ProfileExperience(Base):
    """Work experience entry, used only as keyword-extraction input."""

    __tablename__ = "profile_experience"

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    profile_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    duration: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    profile: Mapped[Profile] = relationship(back_populates="experience")
