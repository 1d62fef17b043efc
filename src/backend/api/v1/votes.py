"""
Competitor-poll vote endpoint.
"""

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import http_error, rate_limit_vote
from core.exceptions import PollingError
from db.session import get_db
from schemas.vote import CompetitorVoteCreate, VoteRecorded
from services.vote_service import VoteService

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=VoteRecorded,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit_vote)],
)
async def cast_vote(
    vote_data: CompetitorVoteCreate,
    db: AsyncSession = Depends(get_db),
) -> VoteRecorded:
    """
    Cast a vote for a competitor.

    Requirements:
    - The competitor must belong to the poll (400 otherwise)
    - One vote per voter unless the poll allows multiple votes (403)
    - The poll's voting window must still be open
    """
    try:
        await VoteService(db).cast_vote(vote_data)
    except PollingError as e:
        if e.status_code == status.HTTP_403_FORBIDDEN:
            logger.info("duplicate_competitor_vote", poll_id=vote_data.poll_id)
        raise http_error(e)

    return VoteRecorded(message="Vote recorded successfully.")
