"""
Poll-related Pydantic schemas.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import Field, field_validator

from models.poll import QuestionType
from schemas.base import CamelSchema, blank_to_none


# ============================================================================
# Output
# ============================================================================


class CompetitorOut(CamelSchema):
    id: int
    name: str
    party: Optional[str] = None
    profile_image: Optional[str] = None


class OptionOut(CamelSchema):
    id: int
    option_text: str


class QuestionOut(CamelSchema):
    id: int
    type: str
    question_text: str
    options: list[OptionOut] = []
    is_competitor_question: bool = False


class PollListItem(CamelSchema):
    """Poll row as listed on index pages."""

    id: int
    title: str
    category: str
    presidential: Optional[str] = None
    region: str
    county: str
    constituency: str
    ward: str
    published: bool = False
    allow_multiple_votes: bool = False
    voting_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class PollDetail(PollListItem):
    """Poll with its competitors and questions."""

    competitors: list[CompetitorOut]
    questions: list[QuestionOut]


class PollCreated(CamelSchema):
    id: int


class MessageResponse(CamelSchema):
    message: str


# ============================================================================
# Input
# ============================================================================


class PollCreate(CamelSchema):
    """Schema for creating a new poll."""

    title: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    region: str = Field(..., min_length=1)
    presidential: Optional[str] = None
    county: Optional[str] = None
    constituency: Optional[str] = None
    ward: Optional[str] = None
    voting_expires_at: Optional[datetime] = None
    allow_multiple_votes: bool = False
    published: bool = False

    @field_validator("presidential", "county", "constituency", "ward", mode="before")
    @classmethod
    def empty_as_missing(cls, v: object) -> object:
        return blank_to_none(v)


class CompetitorCreate(CamelSchema):
    name: str = Field(..., min_length=1)
    party: Optional[str] = None
    profile_image_url: Optional[str] = None


class OptionIn(CamelSchema):
    """Option given as an object; plain strings are also accepted."""

    option_text: Optional[str] = None
    text: Optional[str] = None

    @property
    def value(self) -> str:
        return self.option_text or self.text or ""


class QuestionCreate(CamelSchema):
    type: QuestionType
    question_text: str = Field(..., min_length=1)
    options: list[Union[str, OptionIn]] = []
    is_competitor_question: bool = False
    scale: Optional[int] = Field(None, ge=2, le=10, description="Rating scale maximum")

    @property
    def option_texts(self) -> list[str]:
        texts = [o if isinstance(o, str) else o.value for o in self.options]
        return [t.strip() for t in texts if t and t.strip()]


class QuestionUpdate(QuestionCreate):
    """Question in an update request; `id` set for existing questions."""

    id: Optional[int] = None


class QuizCreate(CamelSchema):
    """Competitors and questions added to an existing poll."""

    competitors: list[CompetitorCreate] = []
    questions: list[QuestionCreate] = []


class QuizUpdate(CamelSchema):
    questions: list[QuestionUpdate] = []


class PublishUpdate(CamelSchema):
    published: bool
