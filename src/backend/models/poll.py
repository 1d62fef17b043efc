"""
Poll structure models.

A poll owns competitors (candidate-style polls) and typed questions
(opinion surveys); both kinds share the same tables.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base


class QuestionType(str, Enum):
    """Closed set of question types; drives the tally rule at read time."""

    SINGLE_CHOICE = "single-choice"
    MULTI_CHOICE = "multi-choice"
    OPEN_ENDED = "open-ended"
    YES_NO_NOT_SURE = "yes-no-notsure"
    RATING = "rating"
    RANKING = "ranking"
    IMAGE_UPLOAD = "image-upload"
    AUDIO_RECORDING = "audio-recording"
    LOCATION = "location"


# Type strings as stored on questions
CHOICE_QUESTION_TYPES = frozenset(
    {
        QuestionType.SINGLE_CHOICE.value,
        QuestionType.MULTI_CHOICE.value,
        QuestionType.YES_NO_NOT_SURE.value,
    }
)

# Question types that own option rows
OPTION_QUESTION_TYPES = CHOICE_QUESTION_TYPES | {QuestionType.RANKING.value}


class Poll(Base):
    """A votable / surveyable unit."""

    __tablename__ = "polls"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    title: Mapped[str] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(100), index=True)
    presidential: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Geographic scope
    region: Mapped[str] = mapped_column(String(100))
    county: Mapped[str] = mapped_column(String(100), default="All")
    constituency: Mapped[str] = mapped_column(String(100), default="All")
    ward: Mapped[str] = mapped_column(String(100), default="All")

    published: Mapped[bool] = mapped_column(Boolean, default=False)
    allow_multiple_votes: Mapped[bool] = mapped_column(Boolean, default=False)
    voting_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Competitor-poll tallies
    total_votes: Mapped[int] = mapped_column(Integer, default=0)
    spoiled_votes: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )

    competitors: Mapped[List["Competitor"]] = relationship(
        "Competitor",
        back_populates="poll",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Competitor.id",
    )
    questions: Mapped[List["Question"]] = relationship(
        "Question",
        back_populates="poll",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Question.id",
    )

    @property
    def is_expired(self) -> bool:
        """Check if the voting window has closed."""
        if self.voting_expires_at is None:
            return False
        expires_at = self.voting_expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) > expires_at

    def __repr__(self) -> str:
        return f"<Poll {self.id}: {self.title}>"


class Competitor(Base):
    """A candidate in a competitor-style poll."""

    __tablename__ = "poll_competitors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    poll_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("polls.id", ondelete="CASCADE"),
        index=True,
    )
    name: Mapped[str] = mapped_column(Text)
    party: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    profile_image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    poll: Mapped["Poll"] = relationship("Poll", back_populates="competitors")


class Question(Base):
    """A typed prompt within a poll."""

    __tablename__ = "poll_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    poll_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("polls.id", ondelete="CASCADE"),
        index=True,
    )
    type: Mapped[str] = mapped_column(String(30))
    question_text: Mapped[str] = mapped_column(Text)
    is_competitor_question: Mapped[bool] = mapped_column(Boolean, default=False)

    poll: Mapped["Poll"] = relationship("Poll", back_populates="questions")
    options: Mapped[List["Option"]] = relationship(
        "Option",
        back_populates="question",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Option.id",
    )


class Option(Base):
    """
    Option belonging to a question.

    For rating questions the single option holds the JSON-encoded scale.
    """

    __tablename__ = "poll_options"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("poll_questions.id", ondelete="CASCADE"),
        index=True,
    )
    option_text: Mapped[str] = mapped_column(Text)

    question: Mapped["Question"] = relationship("Question", back_populates="options")
