"""
Pytest fixtures for the polling backend tests.
"""

import os
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.setdefault("POSTGRES_PASSWORD", "test-password")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_DB", "polling_test")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("ENABLE_VOTE_HISTORY_SNAPSHOTS", "false")


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """Create mock database session."""
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
async def app() -> Any:
    """Create FastAPI application for testing."""
    from main import app as fastapi_app

    return fastapi_app


@pytest.fixture
async def client(app: Any, mock_db_session: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    """Async test client with the session dependency replaced by a mock."""
    from db.session import get_db

    async def override_get_db() -> AsyncGenerator[AsyncMock, None]:
        yield mock_db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_rate_limits() -> None:
    """Each test starts with empty rate-limit windows."""
    from services.rate_limit_service import rate_limit_service

    rate_limit_service.reset()


@pytest.fixture
def poll_header() -> SimpleNamespace:
    """Poll row as returned by PollRepository.get_header."""
    return SimpleNamespace(
        id=7,
        title="County priorities",
        category="Governance",
        presidential=None,
        region="Coast",
        county="Mombasa",
        constituency="All",
        ward="All",
        allow_multiple_votes=False,
        is_expired=False,
        total_votes=4,
        spoiled_votes=0,
        voting_expires_at=None,
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_submission() -> dict[str, Any]:
    """Opinion vote body as sent by the frontend."""
    return {
        "userIdentifier": "device-abc",
        "respondentName": "Amina",
        "respondentAge": 31,
        "respondentGender": "Female",
        "county": "Mombasa",
        "constituency": "Changamwe",
        "ward": "Port Reitz",
        "responses": [
            {"questionId": 1, "type": "single-choice", "selectedOptionIds": [11]},
            {"questionId": 2, "type": "rating", "rating": 4},
            {"questionId": 3, "type": "ranking", "selectedOptionIds": [31, 33, 32]},
            {"questionId": 4, "type": "open-ended", "openEndedResponse": "Fix the roads"},
        ],
    }


@pytest.fixture
def poll_model() -> Any:
    """Poll with competitors and questions loaded, as from PollRepository.get_by_id."""
    from models.poll import Competitor, Option, Poll, Question

    return Poll(
        id=7,
        title="County priorities",
        category="Governance",
        presidential=None,
        region="Coast",
        county="Mombasa",
        constituency="All",
        ward="All",
        published=True,
        allow_multiple_votes=False,
        voting_expires_at=None,
        total_votes=4,
        spoiled_votes=0,
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        competitors=[
            Competitor(id=2, name="Achieng", party=None, profile_image_url="https://cdn.example/a.png"),
        ],
        questions=[
            Question(
                id=1,
                type="single-choice",
                question_text="Top priority?",
                is_competitor_question=False,
                options=[Option(id=11, option_text="Roads"), Option(id=12, option_text="Water")],
            ),
            Question(
                id=2,
                type="rating",
                question_text="Rate the county",
                is_competitor_question=False,
                options=[Option(id=21, option_text='{"min": 1, "max": 5}')],
            ),
        ],
    )
