"""
Tests for opinion poll endpoints.
"""

from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from core.exceptions import AlreadyVotedError, PollNotFoundError, VotingClosedError
from repositories.filters import LocationFilter
from schemas.results import (
    AggregatedResponse,
    ChoiceResult,
    Demographics,
    PollResults,
    PollSummary,
)


def results_payload() -> PollResults:
    return PollResults(
        poll=PollSummary(
            id=7,
            title="County priorities",
            category="Governance",
            competitors=[],
            questions=[],
        ),
        aggregated_responses=[
            AggregatedResponse(
                question_id=1,
                question_text="Top priority?",
                type="single-choice",
                total_responses=3,
                total_selections=3,
                choices=[ChoiceResult(id=11, label="Roads", count=3, percentage=100.0)],
            )
        ],
        demographics=Demographics(gender=[], age_ranges=[], total_respondents=3),
        location=[],
    )


@pytest.mark.unit
class TestOpinionVote:
    async def test_vote_created(self, client: AsyncClient, sample_submission: dict[str, Any]) -> None:
        with patch("api.v1.opinions.ResponseCollector") as collector_cls:
            collector_cls.return_value.submit = AsyncMock(return_value=42)
            response = await client.post("/api/Opinions/7/vote", json=sample_submission)

        assert response.status_code == 201
        assert response.json() == {
            "message": "Response submitted successfully.",
            "responseId": 42,
        }
        poll_id, submission = collector_cls.return_value.submit.call_args.args
        assert poll_id == 7
        assert submission.user_identifier == "device-abc"
        assert len(submission.responses) == 4

    async def test_duplicate_vote_forbidden(
        self, client: AsyncClient, sample_submission: dict[str, Any]
    ) -> None:
        with patch("api.v1.opinions.ResponseCollector") as collector_cls:
            collector_cls.return_value.submit = AsyncMock(
                side_effect=AlreadyVotedError(7, "device-abc")
            )
            response = await client.post("/api/Opinions/7/vote", json=sample_submission)

        assert response.status_code == 403
        assert response.json()["detail"] == "You have already voted in this poll."

    async def test_expired_poll_rejected(
        self, client: AsyncClient, sample_submission: dict[str, Any]
    ) -> None:
        with patch("api.v1.opinions.ResponseCollector") as collector_cls:
            collector_cls.return_value.submit = AsyncMock(
                side_effect=VotingClosedError("Voting for this poll has ended.")
            )
            response = await client.post("/api/Opinions/7/vote", json=sample_submission)

        assert response.status_code == 400

    async def test_empty_responses_rejected(
        self, client: AsyncClient, sample_submission: dict[str, Any]
    ) -> None:
        sample_submission["responses"] = []

        with patch("api.v1.opinions.ResponseCollector") as collector_cls:
            response = await client.post("/api/Opinions/7/vote", json=sample_submission)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request."
        collector_cls.assert_not_called()

    async def test_missing_identifier_rejected(
        self, client: AsyncClient, sample_submission: dict[str, Any]
    ) -> None:
        del sample_submission["userIdentifier"]

        response = await client.post("/api/Opinions/7/vote", json=sample_submission)

        assert response.status_code == 400

    async def test_second_quick_vote_rate_limited(
        self, client: AsyncClient, sample_submission: dict[str, Any]
    ) -> None:
        with patch("api.v1.opinions.ResponseCollector") as collector_cls:
            collector_cls.return_value.submit = AsyncMock(return_value=42)
            first = await client.post("/api/Opinions/7/vote", json=sample_submission)
            second = await client.post("/api/Opinions/7/vote", json=sample_submission)

        assert first.status_code == 201
        assert second.status_code == 429
        assert "Retry-After" in second.headers
        assert collector_cls.return_value.submit.await_count == 1


@pytest.mark.unit
class TestVoteStatus:
    async def test_status(self, client: AsyncClient) -> None:
        with patch("api.v1.opinions.ResponseCollector") as collector_cls:
            collector_cls.return_value.has_voted = AsyncMock(return_value=True)
            response = await client.get(
                "/api/Opinions/status", params={"pollId": "7", "voter_id": "device-abc"}
            )

        assert response.status_code == 200
        assert response.json() == {"success": True, "alreadyVoted": True}
        collector_cls.return_value.has_voted.assert_awaited_once_with(7, "device-abc")

    async def test_status_requires_both_params(self, client: AsyncClient) -> None:
        response = await client.get("/api/Opinions/status", params={"pollId": "7"})

        assert response.status_code == 400

    async def test_status_rejects_non_numeric_poll(self, client: AsyncClient) -> None:
        response = await client.get(
            "/api/Opinions/status", params={"pollId": "abc", "voter_id": "device-abc"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid poll ID."

    async def test_status_unknown_poll(self, client: AsyncClient) -> None:
        with patch("api.v1.opinions.ResponseCollector") as collector_cls:
            collector_cls.return_value.has_voted = AsyncMock(side_effect=PollNotFoundError(99))
            response = await client.get(
                "/api/Opinions/status", params={"pollId": "99", "voter_id": "device-abc"}
            )

        assert response.status_code == 404


@pytest.mark.unit
class TestResults:
    async def test_results_omit_fields_of_other_types(self, client: AsyncClient) -> None:
        with patch("api.v1.opinions.ResultsService") as service_cls:
            service_cls.return_value.get_results = AsyncMock(return_value=results_payload())
            response = await client.get("/api/Opinions/7/results")

        assert response.status_code == 200
        question = response.json()["aggregatedResponses"][0]
        assert question["questionId"] == 1
        assert question["totalSelections"] == 3
        assert "averageRating" not in question
        assert "rankingData" not in question
        assert response.json()["demographics"]["totalRespondents"] == 3

    async def test_repeated_filter_uses_first_value(self, client: AsyncClient) -> None:
        with patch("api.v1.opinions.ResultsService") as service_cls:
            service_cls.return_value.get_results = AsyncMock(return_value=results_payload())
            await client.get(
                "/api/Opinions/7/results?constituency=Changamwe&constituency=Nyali&ward=%20"
            )

        poll_id, location = service_cls.return_value.get_results.call_args.args
        assert poll_id == 7
        assert location == LocationFilter(constituency="Changamwe")

    async def test_results_unknown_poll(self, client: AsyncClient) -> None:
        with patch("api.v1.opinions.ResultsService") as service_cls:
            service_cls.return_value.get_results = AsyncMock(side_effect=PollNotFoundError(99))
            response = await client.get("/api/Opinions/99/results")

        assert response.status_code == 404


@pytest.mark.unit
class TestBulkData:
    async def test_bulk_response_created(self, client: AsyncClient) -> None:
        with patch("api.v1.opinions.AdminOverrideService") as service_cls:
            service_cls.return_value.upsert_bulk_response = AsyncMock(return_value=True)
            response = await client.post(
                "/api/Opinions/7/admin-bulk-response",
                json={"questionId": 1, "constituency": "", "optionCounts": {"11": 5}},
            )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Admin bulk response created successfully.",
            "created": True,
        }
        _, data = service_cls.return_value.upsert_bulk_response.call_args.args
        assert data.constituency is None
        assert data.option_counts == {"11": 5}

    async def test_bulk_response_updated(self, client: AsyncClient) -> None:
        with patch("api.v1.opinions.AdminOverrideService") as service_cls:
            service_cls.return_value.upsert_bulk_response = AsyncMock(return_value=False)
            response = await client.post(
                "/api/Opinions/7/admin-bulk-response",
                json={"questionId": 1, "optionCounts": {"11": 2}},
            )

        assert response.json()["message"] == "Admin bulk response updated successfully."

    async def test_negative_counts_rejected(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/Opinions/7/admin-bulk-response",
            json={"questionId": 1, "optionCounts": {"11": -1}},
        )

        assert response.status_code == 400

    async def test_off_scale_rating_values_rejected(self, client: AsyncClient) -> None:
        with patch("api.v1.opinions.AdminOverrideService") as service_cls:
            response = await client.post(
                "/api/Opinions/7/admin-bulk-response",
                json={"questionId": 2, "ratingValues": [5, 1000]},
            )

        assert response.status_code == 400
        service_cls.assert_not_called()

    async def test_list_bulk_ignores_ward_without_constituency(self, client: AsyncClient) -> None:
        with patch("api.v1.opinions.AdminOverrideService") as service_cls:
            service_cls.return_value.list_bulk_responses = AsyncMock(return_value=[])
            response = await client.get("/api/Opinions/7/admin-bulk-responses?ward=Port%20Reitz")

        assert response.status_code == 200
        assert response.json() == []
        service_cls.return_value.list_bulk_responses.assert_awaited_once_with(7, None, None)

    async def test_demographics_missing_is_null(self, client: AsyncClient) -> None:
        with patch("api.v1.opinions.AdminOverrideService") as service_cls:
            service_cls.return_value.get_demographics = AsyncMock(return_value=None)
            response = await client.get(
                "/api/Opinions/7/admin-demographics?constituency=Changamwe&ward=Port%20Reitz"
            )

        assert response.status_code == 200
        assert response.json() is None
        service_cls.return_value.get_demographics.assert_awaited_once_with(
            7, "Changamwe", "Port Reitz"
        )

    async def test_demographics_upsert(self, client: AsyncClient) -> None:
        with patch("api.v1.opinions.AdminOverrideService") as service_cls:
            service_cls.return_value.upsert_demographics = AsyncMock(return_value=False)
            response = await client.post(
                "/api/Opinions/7/admin-demographics",
                json={"genderCounts": {"Female": 4}, "ageRangeCounts": {"25-34": 4}},
            )

        assert response.json() == {
            "message": "Admin demographics updated successfully.",
            "created": False,
        }
