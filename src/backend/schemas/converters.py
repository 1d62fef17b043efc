"""
Schema converter functions.

Centralized helpers for converting SQLAlchemy models to Pydantic schemas.
Routes and services call these instead of building schemas field by field.
"""

from typing import TYPE_CHECKING

from schemas.poll import CompetitorOut, OptionOut, PollDetail, PollListItem, QuestionOut
from schemas.results import PollSummary

if TYPE_CHECKING:
    from models.poll import Competitor, Poll, Question


def competitor_model_to_schema(competitor: "Competitor") -> CompetitorOut:
    return CompetitorOut(
        id=competitor.id,
        name=competitor.name,
        party=competitor.party,
        profile_image=competitor.profile_image_url,
    )


def question_model_to_schema(question: "Question") -> QuestionOut:
    return QuestionOut(
        id=question.id,
        type=question.type,
        question_text=question.question_text,
        options=[OptionOut(id=o.id, option_text=o.option_text) for o in question.options],
        is_competitor_question=bool(question.is_competitor_question),
    )


def poll_model_to_list_item(poll: "Poll") -> PollListItem:
    """Convert a Poll model to the list schema (no children loaded)."""
    return PollListItem.model_validate(poll)


def poll_model_to_detail(poll: "Poll") -> PollDetail:
    """
    Convert a Poll model with competitors and questions loaded.

    Single source of truth for the poll detail payload used by the poll and
    aspirant endpoints.
    """
    base = PollListItem.model_validate(poll).model_dump()
    return PollDetail(
        **base,
        competitors=[competitor_model_to_schema(c) for c in poll.competitors],
        questions=[question_model_to_schema(q) for q in poll.questions],
    )


def poll_model_to_summary(poll: "Poll") -> PollSummary:
    """Poll header embedded in the results payload."""
    return PollSummary(
        id=poll.id,
        title=poll.title,
        category=poll.category,
        presidential=poll.presidential,
        created_at=poll.created_at,
        competitors=[competitor_model_to_schema(c) for c in poll.competitors],
        questions=[question_model_to_schema(q) for q in poll.questions],
    )
