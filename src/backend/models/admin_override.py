"""
Operator-entered aggregate data.

Rows are keyed by location; a NULL constituency/ward marks a poll-wide
(non-location-specific) row. Both tables treat NULLs as equal in their unique
keys so there is exactly one row per location tuple.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class AdminBulkResponse(Base):
    """Pre-aggregated counts for one question at one location."""

    __tablename__ = "poll_responses_admin"

    __table_args__ = (
        UniqueConstraint(
            "poll_id",
            "question_id",
            "constituency",
            "ward",
            name="uq_poll_responses_admin_location",
            postgresql_nulls_not_distinct=True,
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    poll_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("polls.id", ondelete="CASCADE"),
        index=True,
    )
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("poll_questions.id", ondelete="CASCADE"),
    )
    constituency: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ward: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # {"<option id>": count}, {"<competitor id>": count}
    option_counts: Mapped[dict] = mapped_column(JSONB, default=dict)
    competitor_counts: Mapped[dict] = mapped_column(JSONB, default=dict)
    open_ended_responses: Mapped[list[str]] = mapped_column(ARRAY(Text), default=list)
    rating_values: Mapped[list[int]] = mapped_column(ARRAY(Integer), default=list)
    # {"<option id>": {"rank_1": count, ...}}
    ranking_counts: Mapped[dict] = mapped_column(JSONB, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )


class AdminDemographics(Base):
    """Pre-aggregated gender and age-range counts for one location."""

    __tablename__ = "poll_demographics_admin"

    __table_args__ = (
        UniqueConstraint(
            "poll_id",
            "constituency",
            "ward",
            name="uq_poll_demographics_admin_location",
            postgresql_nulls_not_distinct=True,
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    poll_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("polls.id", ondelete="CASCADE"),
        index=True,
    )
    constituency: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ward: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    gender_counts: Mapped[dict] = mapped_column(JSONB, default=dict)
    age_range_counts: Mapped[dict] = mapped_column(JSONB, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
