"""
Results service.

Loads everything one results request needs and runs the aggregation engine.
Read-only; any failure aborts the whole request.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import PollNotFoundError
from repositories.admin_override_repository import AdminOverrideRepository
from repositories.filters import LocationFilter
from repositories.poll_repository import PollRepository
from repositories.response_repository import ResponseRepository
from schemas.converters import poll_model_to_summary
from schemas.results import LocationFacet, PollResults
from services.aggregation import (
    QuestionSpec,
    RankingCount,
    aggregate_questions,
    build_demographics,
    merge_demographic_rows,
)
from services.answers import ResponseRecord

logger = structlog.get_logger(__name__)


class ResultsService:
    """Builds aggregated results for a poll and location filter."""

    def __init__(self, db: AsyncSession):
        self.polls = PollRepository(db)
        self.responses = ResponseRepository(db)
        self.overrides = AdminOverrideRepository(db)

    async def get_results(self, poll_id: int, location: LocationFilter) -> PollResults:
        poll = await self.polls.get_by_id(poll_id)
        if poll is None:
            raise PollNotFoundError(poll_id)

        rows = await self.responses.fetch_responses(poll_id, location)
        records = [ResponseRecord.from_row(row) for row in rows]
        ranking_counts = [
            RankingCount(question_id, option_id, position, count)
            for question_id, option_id, position, count in await self.responses.ranking_counts(
                poll_id, location
            )
        ]
        ranking_respondents = await self.responses.ranking_respondents(poll_id, location)
        bulk_rows = await self.overrides.list_bulk_for_results(poll_id, location)
        demographic_rows = await self.overrides.list_demographics_for_results(poll_id, location)
        locations = await self.responses.fetch_locations(poll_id)

        aggregated = aggregate_questions(
            questions=[QuestionSpec.from_model(q) for q in poll.questions],
            responses=records,
            bulk_rows=bulk_rows,
            ranking_counts=ranking_counts,
            ranking_respondents=ranking_respondents,
            competitor_names={c.id: c.name for c in poll.competitors},
        )
        demographics = build_demographics(records, merge_demographic_rows(demographic_rows))

        logger.debug(
            "poll_results_built",
            poll_id=poll_id,
            responses=len(records),
            bulk_rows=len(bulk_rows),
            county=location.county,
            constituency=location.constituency,
            ward=location.ward,
        )

        return PollResults(
            poll=poll_model_to_summary(poll),
            aggregated_responses=aggregated,
            demographics=demographics,
            location=[
                LocationFacet(region=region, county=county, constituency=constituency, ward=ward)
                for region, county, constituency, ward in locations
            ],
        )
