"""
Application lifecycle event handlers.

Manages startup and shutdown of the database handle and the background
scheduler.
"""

from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings
from db.session import Database

logger = structlog.get_logger(__name__)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info("Starting polling API...")

        database = Database(
            settings.DATABASE_URL,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            echo=settings.DATABASE_ECHO,
        )
        app.state.database = database
        logger.info("Database handle created", host=settings.POSTGRES_HOST, db=settings.POSTGRES_DB)

        if settings.CREATE_TABLES_ON_STARTUP:
            await database.create_all()

        # Start background scheduler (vote-history snapshots)
        if settings.ENABLE_VOTE_HISTORY_SNAPSHOTS:
            try:
                from services.background_scheduler import start_scheduler

                await start_scheduler(database)
                logger.info("Background scheduler started successfully")
            except Exception as e:
                logger.exception("Failed to start background scheduler", error=str(e))
                logger.warning("Vote history snapshots will not be recorded")

        logger.info("Polling API started successfully")

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info("Shutting down polling API...")

        try:
            from services.background_scheduler import stop_scheduler

            await stop_scheduler()
            logger.info("Background scheduler stopped")
        except Exception as e:
            logger.warning(f"Background scheduler cleanup failed: {e}")

        database = getattr(app.state, "database", None)
        if database is not None:
            await database.dispose()
            app.state.database = None
            logger.info("Database connections closed")

        logger.info("Polling API shutdown complete")

    return stop_app
