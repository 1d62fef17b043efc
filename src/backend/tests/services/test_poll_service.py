"""
Tests for the poll management service.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.exceptions import PollNotFoundError, QuestionNotFoundError
from schemas.poll import PollCreate, QuizCreate, QuizUpdate
from services.poll_service import PollService


@pytest.fixture
def service(mock_db_session) -> PollService:
    service = PollService(mock_db_session)
    service.polls = MagicMock()
    service.polls.create = AsyncMock(return_value=SimpleNamespace(id=7))
    service.polls.exists = AsyncMock(return_value=True)
    service.polls.add_competitor = AsyncMock()
    service.polls.add_question = AsyncMock()
    service.polls.update_question = AsyncMock(return_value=True)
    service.polls.get_question = AsyncMock(return_value=SimpleNamespace(id=12))
    service.polls.set_published = AsyncMock(return_value=True)
    service.polls.delete = AsyncMock(return_value=True)
    return service


@pytest.mark.unit
class TestPollService:
    async def test_create_poll(self, service, mock_db_session) -> None:
        poll_id = await service.create_poll(
            PollCreate(title="Roads", category="Infrastructure", region="Coast")
        )

        assert poll_id == 7
        assert service.polls.create.call_args.kwargs["county"] is None
        mock_db_session.commit.assert_awaited_once()

    async def test_add_quiz_passes_type_strings(self, service, mock_db_session) -> None:
        data = QuizCreate.model_validate(
            {
                "competitors": [{"name": "Achieng"}],
                "questions": [
                    {"type": "ranking", "questionText": "Order these", "options": ["A", "B"]}
                ],
            }
        )

        await service.add_quiz(7, data)

        service.polls.add_competitor.assert_awaited_once()
        kwargs = service.polls.add_question.call_args.kwargs
        assert kwargs["question_type"] == "ranking"
        assert kwargs["option_texts"] == ["A", "B"]
        mock_db_session.commit.assert_awaited_once()

    async def test_add_quiz_unknown_poll(self, service, mock_db_session) -> None:
        service.polls.exists.return_value = False

        with pytest.raises(PollNotFoundError):
            await service.add_quiz(99, QuizCreate())

        mock_db_session.commit.assert_not_awaited()

    async def test_update_quiz_updates_and_inserts(self, service) -> None:
        data = QuizUpdate.model_validate(
            {
                "questions": [
                    {"id": 12, "type": "open-ended", "questionText": "Why?"},
                    {"type": "rating", "questionText": "Rate", "scale": 7},
                ]
            }
        )

        await service.update_quiz(7, data)

        assert service.polls.update_question.call_args.args == (12,)
        assert service.polls.add_question.call_args.kwargs["scale"] == 7

    async def test_update_quiz_foreign_question_rolls_back(self, service, mock_db_session) -> None:
        service.polls.get_question.return_value = None
        data = QuizUpdate.model_validate(
            {"questions": [{"id": 55, "type": "open-ended", "questionText": "Why?"}]}
        )

        with pytest.raises(QuestionNotFoundError):
            await service.update_quiz(7, data)

        mock_db_session.rollback.assert_awaited_once()
        service.polls.update_question.assert_not_awaited()

    async def test_publish_missing_poll(self, service, mock_db_session) -> None:
        service.polls.set_published.return_value = False

        with pytest.raises(PollNotFoundError):
            await service.set_published(99, True)

        mock_db_session.rollback.assert_awaited_once()

    async def test_delete(self, service, mock_db_session) -> None:
        await service.delete_poll(7)

        service.polls.delete.assert_awaited_once_with(7)
        mock_db_session.commit.assert_awaited_once()

    async def test_get_missing_poll(self, service) -> None:
        service.polls.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(PollNotFoundError):
            await service.get_poll(99)
