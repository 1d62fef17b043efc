"""
Aggregated results schemas.

Optional fields are omitted from the JSON body when not applicable to the
question type (routes serialize with `exclude_none`).
"""

from datetime import datetime
from typing import Optional

from schemas.base import CamelSchema
from schemas.poll import CompetitorOut, QuestionOut


class ChoiceResult(CamelSchema):
    """Tally for one option, competitor or rating value."""

    id: int
    label: str
    count: int
    percentage: float


class RankedOption(CamelSchema):
    id: int
    label: str
    count: int


class RankingPosition(CamelSchema):
    """Options placed at one rank position, most frequent first."""

    position: int
    options: list[RankedOption]


class LocationPoint(CamelSchema):
    latitude: float
    longitude: float
    label: Optional[str] = None


class AggregatedResponse(CamelSchema):
    """Per-question aggregate combining individual and bulk data."""

    question_id: int
    question_text: str
    type: str
    is_competitor_question: Optional[bool] = None
    total_responses: int
    choices: Optional[list[ChoiceResult]] = None
    total_selections: Optional[int] = None
    open_ended_responses: Optional[list[str]] = None
    average_rating: Optional[float] = None
    rating_values: Optional[int] = None
    ranking_data: Optional[list[RankingPosition]] = None
    image_urls: Optional[list[str]] = None
    audio_urls: Optional[list[str]] = None
    locations: Optional[list[LocationPoint]] = None


class DemographicBucket(CamelSchema):
    label: str
    count: int
    percentage: float


class Demographics(CamelSchema):
    gender: list[DemographicBucket]
    age_ranges: list[DemographicBucket]
    total_respondents: int


class LocationFacet(CamelSchema):
    """A location that has individual or bulk data for the poll."""

    region: Optional[str] = None
    county: Optional[str] = None
    constituency: Optional[str] = None
    ward: Optional[str] = None


class PollSummary(CamelSchema):
    id: int
    title: str
    category: str
    presidential: Optional[str] = None
    created_at: Optional[datetime] = None
    competitors: list[CompetitorOut]
    questions: list[QuestionOut]


class PollResults(CamelSchema):
    """Full results payload for one poll and location filter."""

    poll: PollSummary
    aggregated_responses: list[AggregatedResponse]
    demographics: Demographics
    location: list[LocationFacet]
