"""
Competitor-poll voting and straight-count results.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import (
    AlreadyVotedError,
    CompetitorNotFoundError,
    PollNotFoundError,
    VotingClosedError,
)
from repositories.poll_repository import PollRepository
from repositories.vote_repository import VoteRepository
from schemas.vote import CompetitorPollResults, CompetitorResult, CompetitorVoteCreate
from services.aggregation import percentage

logger = structlog.get_logger(__name__)

DEFAULT_PARTY = "Independent"


class VoteService:
    """Casts competitor votes and counts them."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.polls = PollRepository(db)
        self.votes = VoteRepository(db)

    async def cast_vote(self, vote: CompetitorVoteCreate) -> int:
        """
        Record one ballot and bump the poll's running total.

        The ballot insert and the counter update commit together.
        """
        poll = await self.polls.get_header(vote.poll_id)
        if poll is None:
            raise PollNotFoundError(vote.poll_id)
        if poll.is_expired:
            raise VotingClosedError("Voting for this poll has closed.")
        if not await self.votes.competitor_in_poll(vote.poll_id, vote.competitor_id):
            raise CompetitorNotFoundError("Competitor does not belong to this poll.")

        try:
            vote_id = await self.votes.create(
                poll_id=vote.poll_id,
                competitor_id=vote.competitor_id,
                voter_id=vote.voter_id,
                is_exclusive=not poll.allow_multiple_votes,
                name=vote.name,
                gender=vote.gender,
                region=vote.region,
                county=vote.county,
                constituency=vote.constituency,
                ward=vote.ward,
            )
            if vote_id is None:
                raise AlreadyVotedError(vote.poll_id, vote.voter_id)
            await self.votes.increment_total_votes(vote.poll_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "competitor_vote_recorded",
            poll_id=vote.poll_id,
            competitor_id=vote.competitor_id,
        )
        return vote_id

    async def get_results(self, poll_id: int) -> CompetitorPollResults:
        poll = await self.polls.get_header(poll_id)
        if poll is None:
            raise PollNotFoundError(poll_id)

        counts = await self.votes.count_by_competitor(poll_id)
        total = sum(count for _, count in counts)
        results = [
            CompetitorResult(
                id=competitor.id,
                name=competitor.name,
                party=competitor.party or DEFAULT_PARTY,
                profile=competitor.profile_image_url,
                vote_count=count,
                percentage=percentage(count, total, digits=2),
            )
            for competitor, count in counts
        ]
        results.sort(key=lambda r: (-r.vote_count, r.id))

        return CompetitorPollResults(
            id=poll.id,
            title=poll.title,
            presidential=poll.presidential,
            category=poll.category,
            region=poll.region,
            county=poll.county,
            constituency=poll.constituency,
            ward=poll.ward,
            total_votes=poll.total_votes or 0,
            spoiled_votes=poll.spoiled_votes or 0,
            voting_expires_at=poll.voting_expires_at,
            created_at=poll.created_at,
            results=results,
        )
