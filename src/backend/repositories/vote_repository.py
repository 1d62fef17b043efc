"""
Vote repository for competitor-poll ballots and vote-history snapshots.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import exists, func, insert, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from models.poll import Competitor, Poll
from models.response import EXCLUSIVE_VOTE_PREDICATE
from models.vote import Vote, VoteHistory


class VoteRepository:
    """Repository for vote database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def competitor_in_poll(self, poll_id: int, competitor_id: int) -> bool:
        result = await self.db.execute(
            select(
                exists().where(
                    Competitor.id == competitor_id,
                    Competitor.poll_id == poll_id,
                )
            )
        )
        return bool(result.scalar())

    async def create(
        self,
        poll_id: int,
        competitor_id: int,
        voter_id: str,
        is_exclusive: bool,
        **details: Any,
    ) -> Optional[int]:
        """
        Insert a ballot.

        Returns None when the voter already holds an exclusive vote for the
        poll; the partial unique index is the only duplicate check.
        """
        stmt = (
            pg_insert(Vote)
            .values(
                poll_id=poll_id,
                competitor_id=competitor_id,
                voter_id=voter_id,
                is_exclusive=is_exclusive,
                **details,
            )
            .on_conflict_do_nothing(
                index_elements=[Vote.poll_id, Vote.voter_id],
                index_where=EXCLUSIVE_VOTE_PREDICATE,
            )
            .returning(Vote.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def increment_total_votes(self, poll_id: int) -> None:
        await self.db.execute(
            update(Poll).where(Poll.id == poll_id).values(total_votes=Poll.total_votes + 1)
        )

    async def count_by_competitor(self, poll_id: int) -> list[tuple[Competitor, int]]:
        """Every competitor of the poll with its straight vote count."""
        result = await self.db.execute(
            select(Competitor, func.count(Vote.id))
            .outerjoin(Vote, Vote.competitor_id == Competitor.id)
            .where(Competitor.poll_id == poll_id)
            .group_by(Competitor.id)
            .order_by(Competitor.id)
        )
        return [(competitor, count) for competitor, count in result.all()]

    async def record_snapshots(self) -> int:
        """Append the cumulative count of every competitor as one history row each."""
        counts = (
            select(Competitor.poll_id, Competitor.id, func.count(Vote.id))
            .outerjoin(Vote, Vote.competitor_id == Competitor.id)
            .group_by(Competitor.poll_id, Competitor.id)
        )
        result = await self.db.execute(
            insert(VoteHistory).from_select(
                ["poll_id", "competitor_id", "vote_count"],
                counts,
            )
        )
        return getattr(result, "rowcount", 0) or 0

    async def history_since(self, poll_id: int, since: datetime) -> list[tuple[int, int, datetime]]:
        """(competitor_id, summed count, minute bucket) rows recorded after `since`."""
        minute = func.date_trunc("minute", VoteHistory.recorded_at).label("recorded_time")
        result = await self.db.execute(
            select(
                VoteHistory.competitor_id,
                func.sum(VoteHistory.vote_count),
                minute,
            )
            .where(VoteHistory.poll_id == poll_id, VoteHistory.recorded_at >= since)
            .group_by(VoteHistory.competitor_id, minute)
            .order_by(minute, VoteHistory.competitor_id)
        )
        return [(competitor_id, int(total or 0), bucket) for competitor_id, total, bucket in result.all()]
