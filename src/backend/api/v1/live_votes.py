"""
Live vote stream (Server-Sent Events).
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from core.config import settings
from db.session import Database, get_database
from repositories.poll_repository import PollRepository
from services.live_stream import resolve_window, vote_history_events

router = APIRouter()


@router.get("/live-stream/{poll_id}")
async def live_vote_stream(
    poll_id: int,
    request: Request,
    interval: Optional[str] = None,
    database: Database = Depends(get_database),
) -> StreamingResponse:
    """
    Stream vote-history rows for a poll.

    `interval` selects the look-back window (15m, 1h or 1d). A frame is sent
    every LIVE_STREAM_INTERVAL_SECONDS until the client disconnects.
    """
    async with database.session() as db:
        found = await PollRepository(db).exists(poll_id)
    if not found:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Poll not found.",
        )

    events = vote_history_events(
        database,
        poll_id,
        window=resolve_window(interval),
        is_disconnected=request.is_disconnected,
        interval_seconds=settings.LIVE_STREAM_INTERVAL_SECONDS,
    )
    return StreamingResponse(
        events,
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
