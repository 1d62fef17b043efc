"""
Schemas for operator-entered bulk data.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import Field, field_validator

from schemas.base import CamelSchema, blank_to_none
from services.answers import RATING_MAX, RATING_MIN

RatingValue = Annotated[int, Field(ge=RATING_MIN, le=RATING_MAX)]


def _check_counts(counts: dict[str, int]) -> dict[str, int]:
    for key, value in counts.items():
        if value < 0:
            raise ValueError(f"count for {key!r} must not be negative")
    return counts


def _check_id_keys(counts: dict[str, int]) -> dict[str, int]:
    for key in counts:
        try:
            int(key)
        except ValueError:
            raise ValueError(f"key {key!r} is not a numeric id")
    return counts


class LocationScoped(CamelSchema):
    """Constituency/ward key; missing or blank means poll-wide."""

    constituency: Optional[str] = None
    ward: Optional[str] = None

    @field_validator("constituency", "ward", mode="before")
    @classmethod
    def empty_as_missing(cls, v: object) -> object:
        return blank_to_none(v)


class BulkResponseUpsert(LocationScoped):
    """Full count maps for one question at one location (replaces prior maps)."""

    question_id: int
    option_counts: dict[str, int] = Field(default_factory=dict)
    competitor_counts: dict[str, int] = Field(default_factory=dict)
    open_ended_responses: list[str] = Field(default_factory=list)
    rating_values: list[RatingValue] = Field(default_factory=list)
    ranking_counts: dict[str, dict[str, int]] = Field(default_factory=dict)

    @field_validator("option_counts", "competitor_counts")
    @classmethod
    def numeric_non_negative(cls, v: dict[str, int]) -> dict[str, int]:
        return _check_id_keys(_check_counts(v))

    @field_validator("ranking_counts")
    @classmethod
    def non_negative_ranks(cls, v: dict[str, dict[str, int]]) -> dict[str, dict[str, int]]:
        for ranks in v.values():
            _check_counts(ranks)
        return v


class BulkResponseOut(LocationScoped):
    question_id: int
    option_counts: dict[str, int] = Field(default_factory=dict)
    competitor_counts: dict[str, int] = Field(default_factory=dict)
    open_ended_responses: list[str] = Field(default_factory=list)
    rating_values: list[int] = Field(default_factory=list)
    ranking_counts: dict[str, dict[str, int]] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None

    @field_validator("option_counts", "competitor_counts", "ranking_counts", mode="before")
    @classmethod
    def null_map(cls, v: object) -> object:
        return {} if v is None else v

    @field_validator("open_ended_responses", "rating_values", mode="before")
    @classmethod
    def null_list(cls, v: object) -> object:
        return [] if v is None else v


class DemographicsUpsert(LocationScoped):
    gender_counts: dict[str, int] = Field(default_factory=dict)
    age_range_counts: dict[str, int] = Field(default_factory=dict)

    @field_validator("gender_counts", "age_range_counts")
    @classmethod
    def non_negative(cls, v: dict[str, int]) -> dict[str, int]:
        return _check_counts(v)


class DemographicsOut(LocationScoped):
    gender_counts: dict[str, int] = Field(default_factory=dict)
    age_range_counts: dict[str, int] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None

    @field_validator("gender_counts", "age_range_counts", mode="before")
    @classmethod
    def null_map(cls, v: object) -> object:
        return {} if v is None else v


class UpsertResult(CamelSchema):
    message: str
    created: bool
