"""
Tests for competitor vote and aspirant endpoints.
"""

from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from core.exceptions import AlreadyVotedError, CompetitorNotFoundError, PollNotFoundError
from schemas.vote import CompetitorPollResults, CompetitorResult


def vote_body() -> dict[str, Any]:
    return {"id": 7, "competitorId": 2, "voter_id": "device-abc", "gender": "Female"}


@pytest.mark.unit
class TestCastVote:
    async def test_vote_recorded(self, client: AsyncClient) -> None:
        with patch("api.v1.votes.VoteService") as service_cls:
            service_cls.return_value.cast_vote = AsyncMock(return_value=5)
            response = await client.post("/api/votes", json=vote_body())

        assert response.status_code == 201
        assert response.json() == {"message": "Vote recorded successfully."}
        vote = service_cls.return_value.cast_vote.call_args.args[0]
        assert (vote.poll_id, vote.competitor_id, vote.voter_id) == (7, 2, "device-abc")

    async def test_duplicate_vote(self, client: AsyncClient) -> None:
        with patch("api.v1.votes.VoteService") as service_cls:
            service_cls.return_value.cast_vote = AsyncMock(
                side_effect=AlreadyVotedError(7, "device-abc")
            )
            response = await client.post("/api/votes", json=vote_body())

        assert response.status_code == 403

    async def test_competitor_outside_poll(self, client: AsyncClient) -> None:
        with patch("api.v1.votes.VoteService") as service_cls:
            service_cls.return_value.cast_vote = AsyncMock(
                side_effect=CompetitorNotFoundError("Competitor does not belong to this poll.")
            )
            response = await client.post("/api/votes", json=vote_body())

        assert response.status_code == 400

    async def test_missing_voter(self, client: AsyncClient) -> None:
        body = vote_body()
        del body["voter_id"]

        response = await client.post("/api/votes", json=body)

        assert response.status_code == 400

    async def test_rate_limited(self, client: AsyncClient) -> None:
        with patch("api.v1.votes.VoteService") as service_cls:
            service_cls.return_value.cast_vote = AsyncMock(return_value=5)
            await client.post("/api/votes", json=vote_body())
            response = await client.post(
                "/api/votes", json=vote_body(), headers={"X-Forwarded-For": "127.0.0.1"}
            )

        assert response.status_code == 429
        assert response.headers["X-RateLimit-Remaining"] == "0"


@pytest.mark.unit
class TestAspirantEndpoints:
    async def test_results(self, client: AsyncClient) -> None:
        results = CompetitorPollResults(
            id=7,
            title="Governor race",
            category="Election",
            region="Coast",
            county="Mombasa",
            constituency="All",
            ward="All",
            total_votes=3,
            spoiled_votes=0,
            created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
            results=[
                CompetitorResult(
                    id=2, name="Achieng", party="Independent", vote_count=2, percentage=66.67
                ),
                CompetitorResult(
                    id=3, name="Baraka", party="Green", vote_count=1, percentage=33.33
                ),
            ],
        )
        with patch("api.v1.aspirants.VoteService") as service_cls:
            service_cls.return_value.get_results = AsyncMock(return_value=results)
            response = await client.get("/api/aspirant/7")

        assert response.status_code == 200
        data = response.json()
        assert data["totalVotes"] == 3
        assert data["results"][0]["voteCount"] == 2
        assert data["results"][0]["percentage"] == 66.67

    async def test_results_unknown_poll(self, client: AsyncClient) -> None:
        with patch("api.v1.aspirants.VoteService") as service_cls:
            service_cls.return_value.get_results = AsyncMock(side_effect=PollNotFoundError(99))
            response = await client.get("/api/aspirant/99")

        assert response.status_code == 404

    async def test_list(self, client: AsyncClient, poll_model: Any) -> None:
        with patch("api.v1.aspirants.PollRepository") as repo_cls:
            repo_cls.return_value.list_competitor_polls = AsyncMock(return_value=[poll_model])
            response = await client.get("/api/aspirant")

        assert response.status_code == 200
        assert response.json()[0]["competitors"][0]["name"] == "Achieng"
