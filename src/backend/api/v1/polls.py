"""
Poll management endpoints.

Operators create a poll, then attach competitors and typed questions
("quiz") to it; publishing and deletion round out the lifecycle.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import http_error
from core.exceptions import PollingError
from db.session import get_db
from schemas.converters import poll_model_to_detail, poll_model_to_list_item
from schemas.poll import (
    MessageResponse,
    PollCreate,
    PollCreated,
    PollDetail,
    PollListItem,
    PublishUpdate,
    QuizCreate,
    QuizUpdate,
)
from services.poll_service import PollService

router = APIRouter()


@router.post("", response_model=PollCreated, status_code=status.HTTP_201_CREATED)
async def create_poll(
    data: PollCreate,
    db: AsyncSession = Depends(get_db),
) -> PollCreated:
    """Create a poll; county, constituency and ward default to "All"."""
    poll_id = await PollService(db).create_poll(data)
    return PollCreated(id=poll_id)


@router.get("", response_model=list[PollListItem])
async def list_polls(db: AsyncSession = Depends(get_db)) -> list[PollListItem]:
    """Opinion polls (at least one non-competitor question), newest first."""
    polls = await PollService(db).list_opinion_polls()
    return [poll_model_to_list_item(p) for p in polls]


@router.get("/{poll_id}", response_model=PollDetail)
async def get_poll(
    poll_id: int,
    db: AsyncSession = Depends(get_db),
) -> PollDetail:
    try:
        poll = await PollService(db).get_poll(poll_id)
    except PollingError as e:
        raise http_error(e)
    return poll_model_to_detail(poll)


@router.post(
    "/{poll_id}/quiz",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_quiz(
    poll_id: int,
    data: QuizCreate,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Add competitors and questions to a poll in one transaction.

    Choice and ranking questions get one option per entry; a rating question
    stores its scale as a single JSON option.
    """
    try:
        await PollService(db).add_quiz(poll_id, data)
    except PollingError as e:
        raise http_error(e)
    return MessageResponse(message="Quiz created successfully.")


@router.put("/{poll_id}/quiz", response_model=MessageResponse)
async def update_quiz(
    poll_id: int,
    data: QuizUpdate,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Update questions with an id (options replaced) and insert the others."""
    try:
        await PollService(db).update_quiz(poll_id, data)
    except PollingError as e:
        raise http_error(e)
    return MessageResponse(message="Quiz updated successfully.")


@router.put("/{poll_id}/publish", response_model=MessageResponse)
async def publish_poll(
    poll_id: int,
    data: PublishUpdate,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        await PollService(db).set_published(poll_id, data.published)
    except PollingError as e:
        raise http_error(e)
    state = "published" if data.published else "unpublished"
    return MessageResponse(message=f"Poll {state} successfully.")


@router.delete("/{poll_id}", response_model=MessageResponse)
async def delete_poll(
    poll_id: int,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete a poll together with its competitors, questions and responses."""
    try:
        await PollService(db).delete_poll(poll_id)
    except PollingError as e:
        raise http_error(e)
    return MessageResponse(message="Poll deleted successfully.")
