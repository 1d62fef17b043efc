"""
Typed answer payloads.

A voter's submission is stored as one row with per-category JSON/array
columns. These classes are the only place that knows the JSON shape of
those columns: the collector serializes through `AnswerBuffers`, the
aggregator parses rows once into `ResponseRecord` and then works with
typed values only.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, TypeVar, Union

RATING_MIN = 1
RATING_MAX = 10


def _as_int(value: Any) -> Optional[int]:
    """Coerce JSON scalars to int, returning None for anything unusable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _clean_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


@dataclass(frozen=True)
class OpenEndedAnswer:
    """Free-text answer to an open-ended question."""

    question_id: int
    response: str

    def to_json(self) -> dict[str, Any]:
        return {"questionId": self.question_id, "response": self.response}

    @classmethod
    def from_json(cls, raw: Any) -> Optional["OpenEndedAnswer"]:
        if not isinstance(raw, dict):
            return None
        question_id = _as_int(raw.get("questionId"))
        response = _clean_text(raw.get("response"))
        if question_id is None or response is None:
            return None
        return cls(question_id=question_id, response=response)


@dataclass(frozen=True)
class RatingAnswer:
    """Rating in the accepted 1-10 range."""

    question_id: int
    rating: int

    def to_json(self) -> dict[str, Any]:
        return {"questionId": self.question_id, "rating": self.rating}

    @classmethod
    def from_json(cls, raw: Any) -> Optional["RatingAnswer"]:
        if not isinstance(raw, dict):
            return None
        question_id = _as_int(raw.get("questionId"))
        rating = _as_int(raw.get("rating"))
        if question_id is None or rating is None:
            return None
        return cls(question_id=question_id, rating=rating)


@dataclass(frozen=True)
class MediaAnswer:
    """URL of an uploaded image or audio recording."""

    question_id: int
    url: str

    def to_json(self) -> dict[str, Any]:
        return {"questionId": self.question_id, "url": self.url}

    @classmethod
    def from_json(cls, raw: Any) -> Optional["MediaAnswer"]:
        if not isinstance(raw, dict):
            return None
        question_id = _as_int(raw.get("questionId"))
        url = _clean_text(raw.get("url"))
        if question_id is None or url is None:
            return None
        return cls(question_id=question_id, url=url)


@dataclass(frozen=True)
class LocationAnswer:
    """A latitude/longitude point."""

    question_id: int
    latitude: float
    longitude: float

    def to_json(self) -> dict[str, Any]:
        return {
            "questionId": self.question_id,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }

    @classmethod
    def from_json(cls, raw: Any) -> Optional["LocationAnswer"]:
        if not isinstance(raw, dict):
            return None
        question_id = _as_int(raw.get("questionId"))
        latitude = _as_float(raw.get("latitude"))
        longitude = _as_float(raw.get("longitude"))
        if question_id is None or latitude is None or longitude is None:
            return None
        return cls(question_id=question_id, latitude=latitude, longitude=longitude)


TaggedAnswer = Union[OpenEndedAnswer, RatingAnswer, MediaAnswer, LocationAnswer]
A = TypeVar("A", OpenEndedAnswer, RatingAnswer, MediaAnswer, LocationAnswer)


def is_valid_rating(value: Any) -> bool:
    """True for integral numeric ratings inside the accepted range."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return float(value).is_integer() and RATING_MIN <= value <= RATING_MAX


def answer_for(answers: Iterable[A], question_id: int) -> Optional[A]:
    """Return the first answer tagged with `question_id`."""
    for answer in answers:
        if answer.question_id == question_id:
            return answer
    return None


@dataclass
class AnswerBuffers:
    """Per-category accumulators for one submission."""

    selected_option_ids: list[int] = field(default_factory=list)
    selected_competitor_ids: list[int] = field(default_factory=list)
    open_ended: list[OpenEndedAnswer] = field(default_factory=list)
    ratings: list[RatingAnswer] = field(default_factory=list)
    images: list[MediaAnswer] = field(default_factory=list)
    audio: list[MediaAnswer] = field(default_factory=list)
    locations: list[LocationAnswer] = field(default_factory=list)

    def column_values(self) -> dict[str, Optional[list]]:
        """Map buffers to response columns; empty buffers become NULL."""

        def _json(items: list) -> Optional[list]:
            return [item.to_json() for item in items] or None

        return {
            "selected_option_ids": list(self.selected_option_ids) or None,
            "selected_competitor_ids": list(self.selected_competitor_ids) or None,
            "open_ended_responses": _json(self.open_ended),
            "rating": _json(self.ratings),
            "image_uploads": _json(self.images),
            "audio_recordings": _json(self.audio),
            "location_responses": _json(self.locations),
        }


def _parse_list(raw: Any, parser) -> tuple:
    if not isinstance(raw, list):
        return ()
    parsed = (parser(item) for item in raw)
    return tuple(item for item in parsed if item is not None)


def _int_list(raw: Any) -> tuple[int, ...]:
    if not isinstance(raw, list):
        return ()
    values = (_as_int(item) for item in raw)
    return tuple(v for v in values if v is not None)


@dataclass(frozen=True)
class ResponseRecord:
    """A stored submission, parsed into typed answers."""

    user_identifier: str
    selected_option_ids: tuple[int, ...] = ()
    selected_competitor_ids: tuple[int, ...] = ()
    open_ended: tuple[OpenEndedAnswer, ...] = ()
    ratings: tuple[RatingAnswer, ...] = ()
    # Rows written before ratings were tagged by question hold bare numbers
    legacy_ratings: tuple[int, ...] = ()
    images: tuple[MediaAnswer, ...] = ()
    audio: tuple[MediaAnswer, ...] = ()
    locations: tuple[LocationAnswer, ...] = ()
    respondent_name: Optional[str] = None
    respondent_gender: Optional[str] = None
    respondent_age: Optional[int] = None

    @classmethod
    def from_row(cls, row: Any) -> "ResponseRecord":
        """Build from a `poll_responses` row (ORM object or result row)."""
        raw_ratings = row.rating if isinstance(row.rating, list) else []
        legacy = [
            item for item in raw_ratings
            if isinstance(item, (int, float)) and not isinstance(item, bool)
        ]
        return cls(
            user_identifier=str(row.user_identifier),
            selected_option_ids=_int_list(row.selected_option_ids),
            selected_competitor_ids=_int_list(row.selected_competitor_ids),
            open_ended=_parse_list(row.open_ended_responses, OpenEndedAnswer.from_json),
            ratings=_parse_list(raw_ratings, RatingAnswer.from_json),
            legacy_ratings=_int_list(legacy),
            images=_parse_list(row.image_uploads, MediaAnswer.from_json),
            audio=_parse_list(row.audio_recordings, MediaAnswer.from_json),
            locations=_parse_list(row.location_responses, LocationAnswer.from_json),
            respondent_name=_clean_text(row.respondent_name),
            respondent_gender=_clean_text(row.respondent_gender),
            respondent_age=_as_int(row.respondent_age),
        )
