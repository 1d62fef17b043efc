"""
Individual opinion-poll responses.

One row per voter submission holding every non-ranking answer in
per-category columns, plus one ranking row per ranked option.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base

# Predicate of the partial unique indexes enforcing one vote per voter.
# Must match the ON CONFLICT target used by the write paths.
EXCLUSIVE_VOTE_PREDICATE = text("is_exclusive")


class PollResponse(Base):
    """
    One voter's full submission to an opinion poll.

    `is_exclusive` is True when the poll disallows multiple votes; the partial
    unique index on (poll_id, user_identifier) then rejects a second row.
    """

    __tablename__ = "poll_responses"

    __table_args__ = (
        Index(
            "uq_poll_responses_exclusive_voter",
            "poll_id",
            "user_identifier",
            unique=True,
            postgresql_where=EXCLUSIVE_VOTE_PREDICATE,
        ),
        Index("ix_poll_responses_poll_location", "poll_id", "county", "constituency", "ward"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    poll_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("polls.id", ondelete="CASCADE"),
        index=True,
    )
    user_identifier: Mapped[str] = mapped_column(String(255))
    is_exclusive: Mapped[bool] = mapped_column(Boolean, default=True)

    # Answer buffers; NULL when the voter gave no answer of that kind
    selected_option_ids: Mapped[Optional[list[int]]] = mapped_column(ARRAY(Integer), nullable=True)
    selected_competitor_ids: Mapped[Optional[list[int]]] = mapped_column(ARRAY(Integer), nullable=True)
    open_ended_responses: Mapped[Optional[list]] = mapped_column(JSONB(none_as_null=True), nullable=True)
    rating: Mapped[Optional[list]] = mapped_column(JSONB(none_as_null=True), nullable=True)
    image_uploads: Mapped[Optional[list]] = mapped_column(JSONB(none_as_null=True), nullable=True)
    audio_recordings: Mapped[Optional[list]] = mapped_column(JSONB(none_as_null=True), nullable=True)
    location_responses: Mapped[Optional[list]] = mapped_column(JSONB(none_as_null=True), nullable=True)

    # Optional demographics
    respondent_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    respondent_age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    respondent_gender: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Respondent location
    region: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    county: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    constituency: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ward: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    voted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )


class RankingEntry(Base):
    """One (voter, ranked option, 1-based position) for a ranking question."""

    __tablename__ = "poll_rankings"

    __table_args__ = (
        Index("ix_poll_rankings_poll_question", "poll_id", "question_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    poll_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("polls.id", ondelete="CASCADE"),
    )
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("poll_questions.id", ondelete="CASCADE"),
    )
    option_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("poll_options.id", ondelete="CASCADE"),
    )
    voter_id: Mapped[str] = mapped_column(String(255))
    rank_position: Mapped[int] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
