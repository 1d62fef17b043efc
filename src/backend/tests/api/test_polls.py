"""
Tests for poll management endpoints.
"""

from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from core.exceptions import PollNotFoundError, QuestionNotFoundError


@pytest.mark.unit
class TestPollEndpoints:
    async def test_create_poll(self, client: AsyncClient) -> None:
        with patch("api.v1.polls.PollService") as service_cls:
            service_cls.return_value.create_poll = AsyncMock(return_value=7)
            response = await client.post(
                "/api/polls",
                json={
                    "title": "County priorities",
                    "category": "Governance",
                    "region": "Coast",
                    "county": "Mombasa",
                    "constituency": "  ",
                },
            )

        assert response.status_code == 201
        assert response.json() == {"id": 7}
        data = service_cls.return_value.create_poll.call_args.args[0]
        assert data.constituency is None
        assert data.allow_multiple_votes is False

    async def test_create_poll_requires_title(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/polls", json={"category": "Governance", "region": "Coast"}
        )

        assert response.status_code == 400

    async def test_get_poll(self, client: AsyncClient, poll_model: Any) -> None:
        with patch("api.v1.polls.PollService") as service_cls:
            service_cls.return_value.get_poll = AsyncMock(return_value=poll_model)
            response = await client.get("/api/polls/7")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == 7
        assert data["allowMultipleVotes"] is False
        assert data["competitors"][0]["profileImage"] == "https://cdn.example/a.png"
        assert [o["optionText"] for o in data["questions"][0]["options"]] == ["Roads", "Water"]

    async def test_get_missing_poll(self, client: AsyncClient) -> None:
        with patch("api.v1.polls.PollService") as service_cls:
            service_cls.return_value.get_poll = AsyncMock(side_effect=PollNotFoundError(99))
            response = await client.get("/api/polls/99")

        assert response.status_code == 404
        assert response.json()["detail"] == "Poll not found."

    async def test_list_polls(self, client: AsyncClient, poll_model: Any) -> None:
        with patch("api.v1.polls.PollService") as service_cls:
            service_cls.return_value.list_opinion_polls = AsyncMock(return_value=[poll_model])
            response = await client.get("/api/polls")

        assert response.status_code == 200
        assert response.json()[0]["title"] == "County priorities"
        assert "questions" not in response.json()[0]


@pytest.mark.unit
class TestQuizEndpoints:
    async def test_create_quiz(self, client: AsyncClient) -> None:
        with patch("api.v1.polls.PollService") as service_cls:
            service_cls.return_value.add_quiz = AsyncMock()
            response = await client.post(
                "/api/polls/7/quiz",
                json={
                    "competitors": [{"name": "Achieng", "party": "Green"}],
                    "questions": [
                        {
                            "type": "multi-choice",
                            "questionText": "Which services?",
                            "options": ["Roads", {"optionText": "Water"}, " "],
                        },
                        {"type": "rating", "questionText": "Rate us", "scale": 10},
                    ],
                },
            )

        assert response.status_code == 201
        assert response.json() == {"message": "Quiz created successfully."}
        _, data = service_cls.return_value.add_quiz.call_args.args
        assert data.questions[0].option_texts == ["Roads", "Water"]
        assert data.questions[1].scale == 10

    async def test_create_quiz_unknown_type(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/polls/7/quiz",
            json={"questions": [{"type": "essay", "questionText": "Why?"}]},
        )

        assert response.status_code == 400

    async def test_update_quiz_foreign_question(self, client: AsyncClient) -> None:
        with patch("api.v1.polls.PollService") as service_cls:
            service_cls.return_value.update_quiz = AsyncMock(side_effect=QuestionNotFoundError(55))
            response = await client.put(
                "/api/polls/7/quiz",
                json={"questions": [{"id": 55, "type": "open-ended", "questionText": "Why?"}]},
            )

        assert response.status_code == 404

    async def test_publish(self, client: AsyncClient) -> None:
        with patch("api.v1.polls.PollService") as service_cls:
            service_cls.return_value.set_published = AsyncMock()
            response = await client.put("/api/polls/7/publish", json={"published": False})

        assert response.json() == {"message": "Poll unpublished successfully."}
        service_cls.return_value.set_published.assert_awaited_once_with(7, False)

    async def test_delete(self, client: AsyncClient) -> None:
        with patch("api.v1.polls.PollService") as service_cls:
            service_cls.return_value.delete_poll = AsyncMock(side_effect=PollNotFoundError(7))
            response = await client.delete("/api/polls/7")

        assert response.status_code == 404
