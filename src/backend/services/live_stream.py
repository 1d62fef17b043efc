"""
Live vote stream.

Server-Sent Events generator re-reading vote-history rows on a fixed tick
until the client goes away.
"""

import asyncio
import json
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import structlog

from db.session import Database
from repositories.vote_repository import VoteRepository
from schemas.vote import VoteHistoryPoint

logger = structlog.get_logger(__name__)

HISTORY_WINDOWS = {
    "15m": timedelta(minutes=15),
    "1h": timedelta(hours=1),
    "1d": timedelta(days=1),
}
DEFAULT_WINDOW = "15m"


def resolve_window(interval: Optional[str]) -> timedelta:
    """Look-back window for an `interval` query value; unknown values use 15m."""
    return HISTORY_WINDOWS.get((interval or "").strip(), HISTORY_WINDOWS[DEFAULT_WINDOW])


def format_sse(data: Any) -> str:
    return f"data: {json.dumps(data)}\n\n"


async def load_history(database: Database, poll_id: int, window: timedelta) -> list[dict]:
    since = datetime.now(timezone.utc) - window
    async with database.session() as db:
        rows = await VoteRepository(db).history_since(poll_id, since)
    return [
        VoteHistoryPoint(
            competitor_id=competitor_id,
            vote_count=count,
            recorded_time=bucket,
        ).model_dump(mode="json", by_alias=True)
        for competitor_id, count, bucket in rows
    ]


async def vote_history_events(
    database: Database,
    poll_id: int,
    window: timedelta,
    is_disconnected: Callable[[], Awaitable[bool]],
    interval_seconds: float,
) -> AsyncGenerator[str, None]:
    """
    Yield one `data:` frame per tick.

    The first frame is sent immediately. A failing tick yields an error frame
    and the stream carries on with the next tick.
    """
    logger.info("live_stream_opened", poll_id=poll_id, window_seconds=window.total_seconds())
    try:
        while not await is_disconnected():
            try:
                yield format_sse(await load_history(database, poll_id, window))
            except Exception as e:
                logger.exception("live_stream_tick_failed", poll_id=poll_id)
                yield format_sse({"error": str(e)})
            await asyncio.sleep(interval_seconds)
    finally:
        logger.info("live_stream_closed", poll_id=poll_id)
