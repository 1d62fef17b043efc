"""
Opinion poll endpoints.

Submission, vote status, aggregated results and operator bulk data.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import (
    first_query_value,
    get_location_filter,
    http_error,
    rate_limit_opinion_vote,
)
from core.exceptions import PollingError
from db.session import get_db
from repositories.filters import LocationFilter
from schemas.admin import (
    BulkResponseOut,
    BulkResponseUpsert,
    DemographicsOut,
    DemographicsUpsert,
    UpsertResult,
)
from schemas.response import ResponseSubmission, SubmissionAccepted, VoteStatus
from schemas.results import PollResults
from services.admin_override_service import AdminOverrideService
from services.response_collector import ResponseCollector
from services.results_service import ResultsService

logger = structlog.get_logger(__name__)

router = APIRouter()


def _exact_location(request: Request) -> tuple[Optional[str], Optional[str]]:
    """(constituency, ward) for exact-location reads; a ward alone means poll-wide."""
    constituency = first_query_value(request, "constituency")
    ward = first_query_value(request, "ward") if constituency else None
    return constituency, ward


@router.get("/status", response_model=VoteStatus)
async def check_vote_status(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> VoteStatus:
    """Whether `voter_id` already submitted a response to `pollId`."""
    raw_poll_id = first_query_value(request, "pollId")
    voter_id = first_query_value(request, "voter_id")
    if raw_poll_id is None or voter_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="pollId and voter_id are required.",
        )
    try:
        poll_id = int(raw_poll_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid poll ID.",
        )

    try:
        already_voted = await ResponseCollector(db).has_voted(poll_id, voter_id)
    except PollingError as e:
        raise http_error(e)

    return VoteStatus(already_voted=already_voted)


@router.post(
    "/{poll_id}/vote",
    response_model=SubmissionAccepted,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit_opinion_vote)],
)
async def submit_response(
    poll_id: int,
    submission: ResponseSubmission,
    db: AsyncSession = Depends(get_db),
) -> SubmissionAccepted:
    """
    Submit a voter's answers to an opinion poll.

    Ranking answers become one row per ranked option; everything else is
    stored in a single response row. All rows are written atomically.
    """
    try:
        response_id = await ResponseCollector(db).submit(poll_id, submission)
    except PollingError as e:
        if e.status_code == status.HTTP_403_FORBIDDEN:
            logger.info("duplicate_opinion_vote", poll_id=poll_id)
        raise http_error(e)

    return SubmissionAccepted(
        message="Response submitted successfully.",
        response_id=response_id,
    )


@router.get(
    "/{poll_id}/results",
    response_model=PollResults,
    response_model_exclude_none=True,
)
async def get_results(
    poll_id: int,
    location: LocationFilter = Depends(get_location_filter),
    db: AsyncSession = Depends(get_db),
) -> PollResults:
    """
    Aggregated results, optionally restricted by county, constituency and ward.

    Bulk data is merged additively: poll-wide rows always, constituency rows
    when a constituency is given, ward rows when both are given.
    """
    try:
        return await ResultsService(db).get_results(poll_id, location)
    except PollingError as e:
        raise http_error(e)


# ============================================================================
# Operator bulk data
# ============================================================================


@router.post("/{poll_id}/admin-bulk-response", response_model=UpsertResult)
async def upsert_bulk_response(
    poll_id: int,
    data: BulkResponseUpsert,
    db: AsyncSession = Depends(get_db),
) -> UpsertResult:
    """Replace the bulk counts for one question at one location."""
    try:
        created = await AdminOverrideService(db).upsert_bulk_response(poll_id, data)
    except PollingError as e:
        raise http_error(e)

    action = "created" if created else "updated"
    return UpsertResult(message=f"Admin bulk response {action} successfully.", created=created)


@router.get("/{poll_id}/admin-bulk-responses", response_model=list[BulkResponseOut])
async def list_bulk_responses(
    poll_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> list[BulkResponseOut]:
    """Bulk rows stored for exactly the requested location."""
    constituency, ward = _exact_location(request)
    try:
        return await AdminOverrideService(db).list_bulk_responses(poll_id, constituency, ward)
    except PollingError as e:
        raise http_error(e)


@router.post("/{poll_id}/admin-demographics", response_model=UpsertResult)
async def upsert_demographics(
    poll_id: int,
    data: DemographicsUpsert,
    db: AsyncSession = Depends(get_db),
) -> UpsertResult:
    try:
        created = await AdminOverrideService(db).upsert_demographics(poll_id, data)
    except PollingError as e:
        raise http_error(e)

    action = "created" if created else "updated"
    return UpsertResult(message=f"Admin demographics {action} successfully.", created=created)


@router.get("/{poll_id}/admin-demographics", response_model=Optional[DemographicsOut])
async def get_demographics(
    poll_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[DemographicsOut]:
    """Demographic bulk row for exactly the requested location, or null."""
    constituency, ward = _exact_location(request)
    try:
        return await AdminOverrideService(db).get_demographics(poll_id, constituency, ward)
    except PollingError as e:
        raise http_error(e)
