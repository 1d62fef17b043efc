"""
Competitor-poll vote schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from schemas.base import CamelSchema, blank_to_none


class CompetitorVoteCreate(BaseModel):
    """Schema for casting a competitor vote; `id` is the poll id."""

    model_config = ConfigDict(populate_by_name=True)

    poll_id: int = Field(..., validation_alias=AliasChoices("id", "pollId", "poll_id"))
    competitor_id: int = Field(
        ..., validation_alias=AliasChoices("competitorId", "competitor_id")
    )
    voter_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("voter_id", "voterId")
    )
    name: Optional[str] = None
    gender: Optional[str] = None
    region: Optional[str] = None
    county: Optional[str] = None
    constituency: Optional[str] = None
    ward: Optional[str] = None

    @field_validator("name", "gender", "region", "county", "constituency", "ward", mode="before")
    @classmethod
    def empty_as_missing(cls, v: object) -> object:
        return blank_to_none(v)


class VoteRecorded(CamelSchema):
    message: str


class CompetitorResult(CamelSchema):
    id: int
    name: str
    party: str
    profile: Optional[str] = None
    vote_count: int
    percentage: float


class CompetitorPollResults(CamelSchema):
    """Straight-count results for a competitor poll."""

    id: int
    title: str
    presidential: Optional[str] = None
    category: str
    region: str
    county: str
    constituency: str
    ward: str
    total_votes: int
    spoiled_votes: int
    voting_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    results: list[CompetitorResult]


class VoteHistoryPoint(CamelSchema):
    """One live-stream row: summed count per competitor per minute."""

    competitor_id: int
    vote_count: int
    recorded_time: datetime
