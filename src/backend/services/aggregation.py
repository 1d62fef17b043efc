"""
Results aggregation engine.

Pure functions that turn stored submissions, ranking rows and operator bulk
data into per-question aggregates. Nothing here touches the database; the
results service loads the inputs and hands them over.

Counting rules by question type:
- choice types: a voter answered when at least one selected option id belongs
  to the question's option set; every matching id is counted.
- competitor question: a voter answered when they picked any competitor.
- rating: the rating value itself is the choice key.
- ranking: counted from ranking rows grouped by (option, position).
- open-ended / media / location: the tagged payload is collected verbatim.

Bulk rows are merged additively after the individual tallies.
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

from models.poll import CHOICE_QUESTION_TYPES, QuestionType
from services.answers import RATING_MAX, RATING_MIN, ResponseRecord, answer_for
from schemas.results import (
    AggregatedResponse,
    ChoiceResult,
    DemographicBucket,
    Demographics,
    LocationPoint,
    RankedOption,
    RankingPosition,
)

AGE_BANDS: tuple[tuple[str, int, Optional[int]], ...] = (
    ("18-24", 18, 24),
    ("25-34", 25, 34),
    ("35-44", 35, 44),
    ("45-54", 45, 54),
    ("55-64", 55, 64),
    ("65-74", 65, 74),
    ("75+", 75, None),
)
AGE_BAND_ORDER = [label for label, _, _ in AGE_BANDS]

RATING_LABELS = {
    1: "Very Poor",
    2: "Poor",
    3: "Fair",
    4: "Good",
    5: "Excellent",
}

UNKNOWN_LABEL = "Unknown"

_RANK_KEY = re.compile(r"^(?:rank_)?(\d+)$")


# ============================================================================
# Inputs
# ============================================================================


@dataclass(frozen=True)
class QuestionSpec:
    """The parts of a question the tally rules need."""

    id: int
    type: str
    question_text: str
    is_competitor_question: bool = False
    options: tuple[tuple[int, str], ...] = ()

    @classmethod
    def from_model(cls, question: Any) -> "QuestionSpec":
        return cls(
            id=question.id,
            type=getattr(question.type, "value", question.type),
            question_text=question.question_text,
            is_competitor_question=bool(question.is_competitor_question),
            options=tuple((o.id, o.option_text) for o in question.options),
        )

    @property
    def option_ids(self) -> frozenset[int]:
        return frozenset(option_id for option_id, _ in self.options)

    def option_label(self, option_id: int) -> str:
        for candidate_id, text in self.options:
            if candidate_id == option_id:
                return text
        return UNKNOWN_LABEL


@dataclass(frozen=True)
class RankingCount:
    """Grouped ranking row: how many voters put `option_id` at `rank_position`."""

    question_id: int
    option_id: int
    rank_position: int
    count: int


@dataclass
class BulkTotals:
    """All bulk rows for one question, summed across the matched locations."""

    option_counts: Counter = field(default_factory=Counter)
    competitor_counts: Counter = field(default_factory=Counter)
    open_ended_responses: list[str] = field(default_factory=list)
    rating_values: list[int] = field(default_factory=list)
    # option id -> Counter(rank position -> count)
    ranking_counts: dict[int, Counter] = field(default_factory=dict)


@dataclass
class DemographicTotals:
    gender_counts: Counter = field(default_factory=Counter)
    age_range_counts: Counter = field(default_factory=Counter)

    @property
    def respondents(self) -> int:
        # Bulk rows carry no identities; either breakdown sums to the headcount
        return sum(self.gender_counts.values()) or sum(self.age_range_counts.values())


# ============================================================================
# Helpers
# ============================================================================


def percentage(count: int, total: int, digits: int = 1) -> float:
    """Share of `total` as a rounded percentage; 0 when total is 0."""
    if total <= 0:
        return 0.0
    return round(count / total * 100, digits)


def age_band(age: Optional[int]) -> Optional[str]:
    """Fixed band for an age, or None for missing / under-18 ages."""
    if age is None:
        return None
    for label, low, high in AGE_BANDS:
        if age >= low and (high is None or age <= high):
            return label
    return None


def _int_key(key: Any) -> Optional[int]:
    try:
        return int(key)
    except (TypeError, ValueError):
        return None


def _add_counts(target: Counter, raw: Optional[Mapping[Any, Any]]) -> None:
    """Add a JSON count map into `target`, skipping unusable keys/values."""
    if not raw:
        return
    for key, value in raw.items():
        key_int = _int_key(key)
        count = _int_key(value)
        if key_int is None or count is None:
            continue
        target[key_int] += count


def _rank_position(key: Any) -> Optional[int]:
    match = _RANK_KEY.match(str(key).strip())
    return int(match.group(1)) if match else None


# ============================================================================
# Bulk merge
# ============================================================================


def merge_bulk_rows(rows: Iterable[Any]) -> dict[int, BulkTotals]:
    """
    Sum bulk rows per question.

    Count maps are added key by key; open-ended texts and rating values are
    appended. Rows are expected to be pre-selected by location.
    """
    merged: dict[int, BulkTotals] = {}
    for row in rows:
        totals = merged.setdefault(row.question_id, BulkTotals())
        _add_counts(totals.option_counts, row.option_counts)
        _add_counts(totals.competitor_counts, row.competitor_counts)
        totals.open_ended_responses.extend(
            text.strip() for text in (row.open_ended_responses or []) if text and text.strip()
        )
        totals.rating_values.extend(
            value for value in (row.rating_values or []) if isinstance(value, int)
        )
        for option_key, ranks in (row.ranking_counts or {}).items():
            option_id = _int_key(option_key)
            if option_id is None or not isinstance(ranks, Mapping):
                continue
            by_rank = totals.ranking_counts.setdefault(option_id, Counter())
            for rank_key, count in ranks.items():
                position = _rank_position(rank_key)
                count_int = _int_key(count)
                if position is None or count_int is None:
                    continue
                by_rank[position] += count_int
    return merged


def merge_demographic_rows(rows: Iterable[Any]) -> DemographicTotals:
    """Sum gender and age-range maps across the matched bulk rows."""
    totals = DemographicTotals()
    for row in rows:
        for key, value in (row.gender_counts or {}).items():
            count = _int_key(value)
            if count is not None:
                totals.gender_counts[str(key)] += count
        for key, value in (row.age_range_counts or {}).items():
            count = _int_key(value)
            if count is not None:
                totals.age_range_counts[str(key)] += count
    return totals


# ============================================================================
# Per-question tallies
# ============================================================================


@dataclass
class _Tally:
    counts: Counter = field(default_factory=Counter)
    answered: set = field(default_factory=set)
    texts: list[str] = field(default_factory=list)
    image_urls: list[str] = field(default_factory=list)
    audio_urls: list[str] = field(default_factory=list)
    points: list[LocationPoint] = field(default_factory=list)


def _tally_individual(question: QuestionSpec, responses: Sequence[ResponseRecord]) -> _Tally:
    tally = _Tally()
    option_ids = question.option_ids

    for record in responses:
        voter = record.user_identifier

        if question.is_competitor_question:
            if record.selected_competitor_ids:
                tally.answered.add(voter)
                tally.counts.update(record.selected_competitor_ids)

        elif question.type in CHOICE_QUESTION_TYPES:
            if not record.selected_option_ids:
                continue
            if option_ids:
                matched = [i for i in record.selected_option_ids if i in option_ids]
                if matched:
                    tally.answered.add(voter)
                    tally.counts.update(matched)
            else:
                # Legacy polls stored no options; any selection counts as an answer
                tally.answered.add(voter)

        elif question.type == QuestionType.RATING:
            rating = answer_for(record.ratings, question.id)
            if rating is not None:
                tally.answered.add(voter)
                tally.counts[rating.rating] += 1
            elif record.legacy_ratings:
                tally.answered.add(voter)
                tally.counts.update(record.legacy_ratings)

        elif question.type == QuestionType.OPEN_ENDED:
            answer = answer_for(record.open_ended, question.id)
            if answer is not None:
                tally.answered.add(voter)
                tally.texts.append(answer.response)

        elif question.type == QuestionType.IMAGE_UPLOAD:
            media = answer_for(record.images, question.id)
            if media is not None:
                tally.answered.add(voter)
                tally.image_urls.append(media.url)

        elif question.type == QuestionType.AUDIO_RECORDING:
            media = answer_for(record.audio, question.id)
            if media is not None:
                tally.answered.add(voter)
                tally.audio_urls.append(media.url)

        elif question.type == QuestionType.LOCATION:
            point = answer_for(record.locations, question.id)
            if point is not None:
                tally.answered.add(voter)
                tally.points.append(
                    LocationPoint(
                        latitude=point.latitude,
                        longitude=point.longitude,
                        label=record.respondent_name,
                    )
                )

    return tally


def _merge_bulk(question: QuestionSpec, tally: _Tally, bulk: Optional[BulkTotals]) -> None:
    if bulk is None:
        return
    if question.is_competitor_question:
        tally.counts.update(bulk.competitor_counts)
    elif question.type == QuestionType.RATING:
        for rating, count in bulk.option_counts.items():
            if RATING_MIN <= rating <= RATING_MAX:
                tally.counts[rating] += count
        tally.counts.update(
            value for value in bulk.rating_values if RATING_MIN <= value <= RATING_MAX
        )
    else:
        tally.counts.update(bulk.option_counts)
    tally.texts.extend(bulk.open_ended_responses)


def _choice_label(
    question: QuestionSpec,
    key: int,
    competitor_names: Mapping[int, str],
) -> str:
    if question.type == QuestionType.RATING:
        return RATING_LABELS.get(key, f"Rating {key}")
    if question.is_competitor_question:
        return competitor_names.get(key, UNKNOWN_LABEL)
    return question.option_label(key)


def _build_choices(
    question: QuestionSpec,
    counts: Counter,
    competitor_names: Mapping[int, str],
) -> list[ChoiceResult]:
    total = sum(counts.values())
    choices = [
        ChoiceResult(
            id=key,
            label=_choice_label(question, key, competitor_names),
            count=count,
            percentage=percentage(count, total),
        )
        for key, count in counts.items()
    ]
    if question.type == QuestionType.RATING:
        choices.sort(key=lambda c: c.id)
    else:
        choices.sort(key=lambda c: (-c.count, c.id))
    return choices


def tally_ranking(
    question: QuestionSpec,
    ranking_counts: Iterable[RankingCount],
    bulk: Optional[BulkTotals],
    respondents: int,
) -> AggregatedResponse:
    """Regroup (option, position) counts into rank-ordered option lists."""
    by_position: dict[int, Counter] = {}
    for row in ranking_counts:
        if row.question_id != question.id:
            continue
        by_position.setdefault(row.rank_position, Counter())[row.option_id] += row.count

    if bulk is not None:
        for option_id, ranks in bulk.ranking_counts.items():
            for position, count in ranks.items():
                by_position.setdefault(position, Counter())[option_id] += count
        # Each bulk ballot has exactly one first choice
        respondents += sum(ranks.get(1, 0) for ranks in bulk.ranking_counts.values())

    ranking_data = [
        RankingPosition(
            position=position,
            options=[
                RankedOption(id=option_id, label=question.option_label(option_id), count=count)
                for option_id, count in sorted(
                    by_position[position].items(), key=lambda item: (-item[1], item[0])
                )
            ],
        )
        for position in sorted(by_position)
    ]

    return AggregatedResponse(
        question_id=question.id,
        question_text=question.question_text,
        type=question.type,
        is_competitor_question=question.is_competitor_question,
        total_responses=respondents,
        ranking_data=ranking_data,
    )


def tally_question(
    question: QuestionSpec,
    responses: Sequence[ResponseRecord],
    bulk: Optional[BulkTotals] = None,
    competitor_names: Optional[Mapping[int, str]] = None,
) -> AggregatedResponse:
    """Aggregate one non-ranking question from submissions plus bulk data."""
    competitor_names = competitor_names or {}
    tally = _tally_individual(question, responses)
    _merge_bulk(question, tally, bulk)

    result = AggregatedResponse(
        question_id=question.id,
        question_text=question.question_text,
        type=question.type,
        is_competitor_question=question.is_competitor_question,
        total_responses=len(tally.answered),
    )

    if tally.counts:
        total = sum(tally.counts.values())
        result.choices = _build_choices(question, tally.counts, competitor_names)
        if question.type == QuestionType.RATING:
            weighted = sum(rating * count for rating, count in tally.counts.items())
            result.average_rating = round(weighted / total, 2) if total > 0 else 0.0
            result.rating_values = total
            # Bulk ratings have no voter identity, so the headcount is the rating total
            result.total_responses = total
        else:
            result.total_selections = total

    if tally.texts:
        result.open_ended_responses = tally.texts
    if tally.image_urls:
        result.image_urls = tally.image_urls
    if tally.audio_urls:
        result.audio_urls = tally.audio_urls
    if tally.points:
        result.locations = tally.points

    return result


# ============================================================================
# Demographics
# ============================================================================


def _buckets(counts: Counter, total: int, order: Optional[list[str]] = None) -> list[DemographicBucket]:
    if order is not None:
        rank = {label: idx for idx, label in enumerate(order)}
        labels = sorted(counts, key=lambda label: (rank.get(label, len(rank)), label))
    else:
        labels = sorted(counts, key=lambda label: (-counts[label], label))
    return [
        DemographicBucket(label=label, count=counts[label], percentage=percentage(counts[label], total))
        for label in labels
    ]


def build_demographics(
    responses: Sequence[ResponseRecord],
    bulk: Optional[DemographicTotals] = None,
) -> Demographics:
    """Gender and age-band breakdown over unique voters plus bulk counts."""
    seen: set[str] = set()
    gender_counts: Counter = Counter()
    age_counts: Counter = Counter()

    for record in responses:
        if record.user_identifier in seen:
            continue
        seen.add(record.user_identifier)
        if record.respondent_gender:
            gender_counts[record.respondent_gender] += 1
        band = age_band(record.respondent_age)
        if band:
            age_counts[band] += 1

    total = len(seen)
    if bulk is not None:
        gender_counts.update(bulk.gender_counts)
        age_counts.update(bulk.age_range_counts)
        total += bulk.respondents

    return Demographics(
        gender=_buckets(gender_counts, total),
        age_ranges=_buckets(age_counts, total, order=AGE_BAND_ORDER),
        total_respondents=total,
    )


# ============================================================================
# Whole poll
# ============================================================================


def aggregate_questions(
    questions: Sequence[QuestionSpec],
    responses: Sequence[ResponseRecord],
    bulk_rows: Iterable[Any] = (),
    ranking_counts: Iterable[RankingCount] = (),
    ranking_respondents: Optional[Mapping[int, int]] = None,
    competitor_names: Optional[Mapping[int, str]] = None,
) -> list[AggregatedResponse]:
    """Aggregate every question of a poll, in question order."""
    bulk_by_question = merge_bulk_rows(bulk_rows)
    ranking_rows = list(ranking_counts)
    ranking_respondents = ranking_respondents or {}

    aggregated = []
    for question in questions:
        bulk = bulk_by_question.get(question.id)
        if question.type == QuestionType.RANKING:
            aggregated.append(
                tally_ranking(
                    question,
                    ranking_rows,
                    bulk,
                    ranking_respondents.get(question.id, 0),
                )
            )
        else:
            aggregated.append(tally_question(question, responses, bulk, competitor_names))
    return aggregated
