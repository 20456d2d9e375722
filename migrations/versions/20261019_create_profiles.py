"""Create profiles, profile_education, profile_experience and llm_costs.

Revision ID: 20261019_profiles
Revises:
Create Date: 2026-10-19

- profiles: tag arrays plus cached offering/looking vectors (pgvector, 768 dims, nullable)
- profile_education / profile_experience: keyword extraction input
- llm_costs: one row per OpenRouter call
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from pgvector.sqlalchemy import Vector
from sqlalchemy.dialects.postgresql import ARRAY, UUID

revision: str = "20261019_profiles"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

VECTOR_DIMENSIONS = 768


def _tag_array() -> ARRAY:
    return ARRAY(sa.String(40))


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS vector")

    op.create_table(
        "profiles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("headline", sa.String(500), nullable=True),
        sa.Column("about", sa.Text(), nullable=True),
        sa.Column("title_tags", _tag_array(), nullable=False, server_default="{}"),
        sa.Column("company_tags", _tag_array(), nullable=False, server_default="{}"),
        sa.Column("looking_tags", _tag_array(), nullable=False, server_default="{}"),
        sa.Column("offering_tags", _tag_array(), nullable=False, server_default="{}"),
        sa.Column("offering_vec", Vector(VECTOR_DIMENSIONS), nullable=True),
        sa.Column("looking_vec", Vector(VECTOR_DIMENSIONS), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )

    op.create_table(
        "profile_education",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "profile_id",
            UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("degree", sa.String(255), nullable=True),
        sa.Column("duration", sa.String(100), nullable=True),
    )
    op.create_index("ix_profile_education_profile_id", "profile_education", ["profile_id"])

    op.create_table(
        "profile_experience",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "profile_id",
            UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("duration", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
    )
    op.create_index("ix_profile_experience_profile_id", "profile_experience", ["profile_id"])

    op.create_table(
        "llm_costs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("run_id", sa.String(100), nullable=False),
        sa.Column("step_key", sa.String(100), nullable=False),
        sa.Column("operation", sa.String(50), nullable=False),
        sa.Column("model", sa.String(100), nullable=False),
        sa.Column("item_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("input_tokens", sa.Integer(), nullable=False),
        sa.Column("output_tokens", sa.Integer(), nullable=False),
        sa.Column("cost_usd", sa.Numeric(10, 6), nullable=False),
        sa.Column("code_version", sa.String(50), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index("ix_llm_costs_run_id", "llm_costs", ["run_id"])


def downgrade() -> None:
    op.drop_index("ix_llm_costs_run_id", table_name="llm_costs")
    op.drop_table("llm_costs")
    op.drop_index("ix_profile_experience_profile_id", table_name="profile_experience")
    op.drop_table("profile_experience")
    op.drop_index("ix_profile_education_profile_id", table_name="profile_education")
    op.drop_table("profile_education")
    op.drop_table("profiles")
