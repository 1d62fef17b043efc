"""
Competitor poll ("aspirant") endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import http_error
from core.exceptions import PollingError
from db.session import get_db
from repositories.poll_repository import PollRepository
from schemas.converters import poll_model_to_detail
from schemas.poll import PollDetail
from schemas.vote import CompetitorPollResults
from services.vote_service import VoteService

router = APIRouter()


@router.get("", response_model=list[PollDetail])
async def list_aspirant_polls(db: AsyncSession = Depends(get_db)) -> list[PollDetail]:
    """Polls that have competitors and no opinion questions, newest first."""
    polls = await PollRepository(db).list_competitor_polls()
    return [poll_model_to_detail(poll) for poll in polls]


@router.get("/{poll_id}", response_model=CompetitorPollResults)
async def get_aspirant_results(
    poll_id: int,
    db: AsyncSession = Depends(get_db),
) -> CompetitorPollResults:
    """
    Straight vote count per competitor.

    Percentages use two decimals of the counted total; competitors are
    ordered by votes, most first.
    """
    try:
        return await VoteService(db).get_results(poll_id)
    except PollingError as e:
        raise http_error(e)
