"""
Opinion-poll submission schemas.
"""

from typing import Optional

from pydantic import Field, field_validator

from models.poll import QuestionType
from schemas.base import CamelSchema, blank_to_none


class ResponseItem(CamelSchema):
    """
    One answer inside a submission.

    Only the payload fields relevant to `type` are expected; the rest stay None.
    For ranking questions `selected_option_ids` is the voter's order.
    """

    question_id: int
    type: QuestionType
    selected_option_ids: Optional[list[int]] = None
    selected_competitor_ids: Optional[list[int]] = None
    open_ended_response: Optional[str] = None
    rating: Optional[float] = None
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("selected_option_ids", "selected_competitor_ids", mode="before")
    @classmethod
    def wrap_scalar_ids(cls, v: object) -> object:
        """Single-choice clients send a bare id instead of a list."""
        if v is None or isinstance(v, list):
            return v
        return [v]


class ResponseSubmission(CamelSchema):
    """A voter's full set of answers to one poll."""

    user_identifier: str = Field(..., min_length=1)
    responses: list[ResponseItem] = Field(..., min_length=1)
    respondent_name: Optional[str] = None
    respondent_age: Optional[int] = Field(None, ge=0, le=150)
    respondent_gender: Optional[str] = None
    region: Optional[str] = None
    county: Optional[str] = None
    constituency: Optional[str] = None
    ward: Optional[str] = None

    @field_validator("user_identifier", mode="before")
    @classmethod
    def strip_identifier(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @field_validator(
        "respondent_name",
        "respondent_gender",
        "region",
        "county",
        "constituency",
        "ward",
        "respondent_age",
        mode="before",
    )
    @classmethod
    def empty_as_missing(cls, v: object) -> object:
        return blank_to_none(v)


class SubmissionAccepted(CamelSchema):
    """Response after a submission is stored."""

    message: str
    response_id: int


class VoteStatus(CamelSchema):
    """Whether a voter already has a submission for a poll."""

    success: bool = True
    already_voted: bool
