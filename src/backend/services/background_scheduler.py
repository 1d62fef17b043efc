"""
Background Scheduler Service

Manages scheduled background tasks using APScheduler:
- Vote-history snapshots (cumulative count per competitor)

This runs in-process with the FastAPI application.
"""

import logging
from datetime import timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config import settings
from db.session import Database
from repositories.vote_repository import VoteRepository

logger = logging.getLogger(__name__)

# Global scheduler instance
_scheduler: Optional[AsyncIOScheduler] = None


async def vote_history_snapshot_job(database: Database) -> int:
    """
    Append one vote-history row per competitor.

    Returns the number of rows written (0 on failure).
    """
    logger.info("Starting vote history snapshot job...")

    try:
        async with database.session() as db:
            repo = VoteRepository(db)
            written = await repo.record_snapshots()
            await db.commit()
    except Exception as e:
        logger.error(f"Vote history snapshot job failed: {e}", exc_info=True)
        return 0

    logger.info(f"Vote history snapshot completed: rows={written}")
    return written


def get_scheduler() -> AsyncIOScheduler:
    """Get the global scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler(timezone=timezone.utc)
    return _scheduler


async def start_scheduler(database: Database) -> None:
    """Start the background scheduler with all jobs."""
    scheduler = get_scheduler()

    if scheduler.running:
        logger.info("Scheduler already running")
        return

    logger.info("Configuring background scheduler...")

    minutes = settings.VOTE_HISTORY_SNAPSHOT_MINUTES
    scheduler.add_job(
        vote_history_snapshot_job,
        trigger=IntervalTrigger(minutes=minutes),
        args=[database],
        id="vote_history_snapshot",
        name="Vote History Snapshot",
        replace_existing=True,
        max_instances=1,
    )
    logger.info(f"Added vote history snapshot job (every {minutes} minutes)")

    scheduler.start()
    logger.info("Background scheduler started")


async def stop_scheduler() -> None:
    """Stop the background scheduler gracefully."""
    global _scheduler

    if _scheduler and _scheduler.running:
        logger.info("Stopping background scheduler...")
        _scheduler.shutdown(wait=True)
        logger.info("Background scheduler stopped")

    _scheduler = None
