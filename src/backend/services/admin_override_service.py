"""
Operator bulk data service.

Each upsert replaces the stored maps for its exact location tuple and commits
on its own.
"""

from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import PollNotFoundError, QuestionNotFoundError
from repositories.admin_override_repository import AdminOverrideRepository
from repositories.poll_repository import PollRepository
from schemas.admin import (
    BulkResponseOut,
    BulkResponseUpsert,
    DemographicsOut,
    DemographicsUpsert,
)

logger = structlog.get_logger(__name__)


class AdminOverrideService:
    """Upserts and exact-location listings of bulk data."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.polls = PollRepository(db)
        self.overrides = AdminOverrideRepository(db)

    async def _require_poll(self, poll_id: int) -> None:
        if not await self.polls.exists(poll_id):
            raise PollNotFoundError(poll_id)

    async def upsert_bulk_response(self, poll_id: int, data: BulkResponseUpsert) -> bool:
        """Store one question's bulk maps; returns True when a new row was created."""
        await self._require_poll(poll_id)
        if await self.polls.get_question(poll_id, data.question_id) is None:
            raise QuestionNotFoundError(data.question_id)

        try:
            _, created = await self.overrides.upsert_bulk(
                poll_id=poll_id,
                question_id=data.question_id,
                constituency=data.constituency,
                ward=data.ward,
                option_counts=data.option_counts,
                competitor_counts=data.competitor_counts,
                open_ended_responses=data.open_ended_responses,
                rating_values=data.rating_values,
                ranking_counts=data.ranking_counts,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "bulk_response_saved",
            poll_id=poll_id,
            question_id=data.question_id,
            constituency=data.constituency,
            ward=data.ward,
            created=created,
        )
        return created

    async def list_bulk_responses(
        self,
        poll_id: int,
        constituency: Optional[str],
        ward: Optional[str],
    ) -> list[BulkResponseOut]:
        await self._require_poll(poll_id)
        rows = await self.overrides.list_bulk_exact(poll_id, constituency, ward)
        return [BulkResponseOut.model_validate(row) for row in rows]

    async def upsert_demographics(self, poll_id: int, data: DemographicsUpsert) -> bool:
        await self._require_poll(poll_id)
        try:
            _, created = await self.overrides.upsert_demographics(
                poll_id=poll_id,
                constituency=data.constituency,
                ward=data.ward,
                gender_counts=data.gender_counts,
                age_range_counts=data.age_range_counts,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "bulk_demographics_saved",
            poll_id=poll_id,
            constituency=data.constituency,
            ward=data.ward,
            created=created,
        )
        return created

    async def get_demographics(
        self,
        poll_id: int,
        constituency: Optional[str],
        ward: Optional[str],
    ) -> Optional[DemographicsOut]:
        await self._require_poll(poll_id)
        row = await self.overrides.get_demographics_exact(poll_id, constituency, ward)
        return DemographicsOut.model_validate(row) if row is not None else None
