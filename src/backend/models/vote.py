"""
Competitor-poll votes and their trend snapshots.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from models.response import EXCLUSIVE_VOTE_PREDICATE


class Vote(Base):
    """A single ballot for one competitor, aggregated by straight COUNT."""

    __tablename__ = "votes"

    __table_args__ = (
        Index(
            "uq_votes_exclusive_voter",
            "poll_id",
            "voter_id",
            unique=True,
            postgresql_where=EXCLUSIVE_VOTE_PREDICATE,
        ),
        Index("ix_votes_poll_competitor", "poll_id", "competitor_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    poll_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("polls.id", ondelete="CASCADE"),
    )
    competitor_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("poll_competitors.id", ondelete="CASCADE"),
    )
    voter_id: Mapped[str] = mapped_column(String(255))
    is_exclusive: Mapped[bool] = mapped_column(Boolean, default=True)

    # Optional demographics / location
    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    region: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    county: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    constituency: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ward: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    voted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )


class VoteHistory(Base):
    """Append-only cumulative vote count per competitor at a point in time."""

    __tablename__ = "vote_history"

    __table_args__ = (
        Index("ix_vote_history_poll_recorded", "poll_id", "recorded_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    poll_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("polls.id", ondelete="CASCADE"),
    )
    competitor_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("poll_competitors.id", ondelete="CASCADE"),
    )
    vote_count: Mapped[int] = mapped_column(Integer, default=0)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
