"""
Poll management service.

Multi-statement writes (quiz creation and update) run in one transaction.
"""

from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import PollNotFoundError, QuestionNotFoundError
from models.poll import Poll
from repositories.poll_repository import PollRepository
from schemas.poll import PollCreate, QuizCreate, QuizUpdate

logger = structlog.get_logger(__name__)


class PollService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.polls = PollRepository(db)

    async def create_poll(self, data: PollCreate) -> int:
        try:
            poll = await self.polls.create(
                title=data.title,
                category=data.category,
                region=data.region,
                presidential=data.presidential,
                county=data.county,
                constituency=data.constituency,
                ward=data.ward,
                voting_expires_at=data.voting_expires_at,
                allow_multiple_votes=data.allow_multiple_votes,
                published=data.published,
            )
            poll_id = poll.id
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("poll_created", poll_id=poll_id, category=data.category)
        return poll_id

    async def add_quiz(self, poll_id: int, data: QuizCreate) -> None:
        """Add competitors and questions to an existing poll."""
        if not await self.polls.exists(poll_id):
            raise PollNotFoundError(poll_id)

        try:
            for competitor in data.competitors:
                await self.polls.add_competitor(
                    poll_id,
                    name=competitor.name,
                    party=competitor.party,
                    profile_image_url=competitor.profile_image_url,
                )
            for question in data.questions:
                await self.polls.add_question(
                    poll_id,
                    question_type=question.type.value,
                    question_text=question.question_text,
                    option_texts=question.option_texts,
                    is_competitor_question=question.is_competitor_question,
                    scale=question.scale,
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "quiz_created",
            poll_id=poll_id,
            competitors=len(data.competitors),
            questions=len(data.questions),
        )

    async def update_quiz(self, poll_id: int, data: QuizUpdate) -> None:
        """Update questions that carry an id and insert the rest."""
        if not await self.polls.exists(poll_id):
            raise PollNotFoundError(poll_id)

        try:
            for question in data.questions:
                fields = dict(
                    question_type=question.type.value,
                    question_text=question.question_text,
                    option_texts=question.option_texts,
                    is_competitor_question=question.is_competitor_question,
                    scale=question.scale,
                )
                if question.id is None:
                    await self.polls.add_question(poll_id, **fields)
                    continue
                if await self.polls.get_question(poll_id, question.id) is None:
                    raise QuestionNotFoundError(question.id)
                await self.polls.update_question(question.id, **fields)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("quiz_updated", poll_id=poll_id, questions=len(data.questions))

    async def get_poll(self, poll_id: int) -> Poll:
        poll = await self.polls.get_by_id(poll_id)
        if poll is None:
            raise PollNotFoundError(poll_id)
        return poll

    async def list_opinion_polls(self) -> list[Poll]:
        return await self.polls.list_opinion_polls()

    async def set_published(self, poll_id: int, published: bool) -> None:
        try:
            updated = await self.polls.set_published(poll_id, published)
            if not updated:
                raise PollNotFoundError(poll_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        logger.info("poll_publish_changed", poll_id=poll_id, published=published)

    async def delete_poll(self, poll_id: int) -> None:
        try:
            deleted = await self.polls.delete(poll_id)
            if not deleted:
                raise PollNotFoundError(poll_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        logger.info("poll_deleted", poll_id=poll_id)
