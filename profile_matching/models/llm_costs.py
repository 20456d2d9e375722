"""Spend tracking for OpenRouter calls."""

from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import DateTime, Index, Integer, Numeric, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from profile_matching.models.base import Base


class LLMCost(Base):
    """One OpenRouter call (completion or embedding) with its token usage and cost.

    Keyed by the Dagster run and op that triggered it so spend can be grouped
    per job, per operation ('extract_tags', 'extract_tags_relaxed', 'embed')
    and per prompt version.
    """

    __tablename__ = "llm_costs"
    __table_args__ = (Index("ix_llm_costs_run_id", "run_id"),)

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    run_id: Mapped[str] = mapped_column(String(100), nullable=False)
    step_key: Mapped[str] = mapped_column(String(100), nullable=False)
    operation: Mapped[str] = mapped_column(String(50), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)

    # Texts embedded in one request; 1 for completions
    item_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    input_tokens: Mapped[int] = mapped_column(Integer, nullable=False)
    output_tokens: Mapped[int] = mapped_column(Integer, nullable=False)
    cost_usd: Mapped[Decimal] = mapped_column(Numeric(10, 6), nullable=False)

    # PROMPT_VERSION of the operation, when it has one
    code_version: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
