"""
Opinion response repository.

Write side stores one aggregate row per submission plus ranking rows; read
side loads what the aggregation engine needs for one poll and filter.
"""

from typing import Any, Optional

from sqlalchemy import String, cast, exists, func, insert, null, select, union
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from models.admin_override import AdminBulkResponse
from models.response import EXCLUSIVE_VOTE_PREDICATE, PollResponse, RankingEntry
from repositories.filters import LocationFilter


class ResponseRepository:
    """Repository for individual opinion responses."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ========================================================================
    # Write side
    # ========================================================================

    async def insert_ranking_entries(
        self,
        poll_id: int,
        voter_id: str,
        entries: list[tuple[int, int, int]],
    ) -> None:
        """Insert (question_id, option_id, rank_position) rows for one voter."""
        if not entries:
            return
        await self.db.execute(
            insert(RankingEntry),
            [
                {
                    "poll_id": poll_id,
                    "question_id": question_id,
                    "option_id": option_id,
                    "voter_id": voter_id,
                    "rank_position": position,
                }
                for question_id, option_id, position in entries
            ],
        )

    async def insert_response(
        self,
        poll_id: int,
        user_identifier: str,
        is_exclusive: bool,
        values: dict[str, Any],
    ) -> Optional[int]:
        """
        Insert the aggregate response row.

        Returns the new row id, or None when the voter already has an
        exclusive row for this poll (the partial unique index rejected it).
        """
        stmt = (
            pg_insert(PollResponse)
            .values(
                poll_id=poll_id,
                user_identifier=user_identifier,
                is_exclusive=is_exclusive,
                **values,
            )
            .on_conflict_do_nothing(
                index_elements=[PollResponse.poll_id, PollResponse.user_identifier],
                index_where=EXCLUSIVE_VOTE_PREDICATE,
            )
            .returning(PollResponse.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def has_voted(self, poll_id: int, user_identifier: str) -> bool:
        result = await self.db.execute(
            select(
                exists().where(
                    PollResponse.poll_id == poll_id,
                    PollResponse.user_identifier == user_identifier,
                )
            )
        )
        return bool(result.scalar())

    # ========================================================================
    # Read side
    # ========================================================================

    async def fetch_responses(
        self,
        poll_id: int,
        location: LocationFilter,
    ) -> list[PollResponse]:
        """All response rows of a poll matching the location filter."""
        result = await self.db.execute(
            select(PollResponse)
            .where(PollResponse.poll_id == poll_id, *location.response_conditions(PollResponse))
            .order_by(PollResponse.id)
        )
        return list(result.scalars().all())

    def _ranking_voter_scope(self, poll_id: int, location: LocationFilter) -> list:
        # Ranking rows carry no location; restrict through the voter's response row
        if location.is_empty:
            return []
        voters = select(PollResponse.user_identifier).where(
            PollResponse.poll_id == poll_id,
            *location.response_conditions(PollResponse),
        )
        return [RankingEntry.voter_id.in_(voters)]

    async def ranking_counts(
        self,
        poll_id: int,
        location: LocationFilter,
    ) -> list[tuple[int, int, int, int]]:
        """(question_id, option_id, rank_position, count) groups for a poll."""
        result = await self.db.execute(
            select(
                RankingEntry.question_id,
                RankingEntry.option_id,
                RankingEntry.rank_position,
                func.count(RankingEntry.id),
            )
            .where(RankingEntry.poll_id == poll_id, *self._ranking_voter_scope(poll_id, location))
            .group_by(
                RankingEntry.question_id,
                RankingEntry.option_id,
                RankingEntry.rank_position,
            )
            .order_by(
                RankingEntry.question_id,
                RankingEntry.rank_position,
                RankingEntry.option_id,
            )
        )
        return [tuple(row) for row in result.all()]

    async def ranking_respondents(
        self,
        poll_id: int,
        location: LocationFilter,
    ) -> dict[int, int]:
        """Distinct voters per ranking question."""
        result = await self.db.execute(
            select(
                RankingEntry.question_id,
                func.count(func.distinct(RankingEntry.voter_id)),
            )
            .where(RankingEntry.poll_id == poll_id, *self._ranking_voter_scope(poll_id, location))
            .group_by(RankingEntry.question_id)
        )
        return {question_id: count for question_id, count in result.all()}

    async def fetch_locations(self, poll_id: int) -> list[tuple[Optional[str], ...]]:
        """
        Distinct (region, county, constituency, ward) with data for the poll.

        Bulk rows only know constituency and ward, so their region and county
        are NULL.
        """
        from_responses = select(
            PollResponse.region,
            PollResponse.county,
            PollResponse.constituency,
            PollResponse.ward,
        ).where(PollResponse.poll_id == poll_id)
        from_bulk = select(
            cast(null(), String).label("region"),
            cast(null(), String).label("county"),
            AdminBulkResponse.constituency,
            AdminBulkResponse.ward,
        ).where(
            AdminBulkResponse.poll_id == poll_id,
            (AdminBulkResponse.constituency.is_not(None)) | (AdminBulkResponse.ward.is_not(None)),
        )
        result = await self.db.execute(union(from_responses, from_bulk))
        rows = [tuple(row) for row in result.all()]
        return sorted(rows, key=lambda row: tuple(value or "" for value in row))
