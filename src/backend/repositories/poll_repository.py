"""
Poll repository for database operations.
"""

import json
from typing import Any, Iterable, Optional

from sqlalchemy import and_, delete, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.poll import OPTION_QUESTION_TYPES, Competitor, Option, Poll, Question, QuestionType


class PollRepository:
    """Repository for poll, competitor and question operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        """Safely get rowcount from result."""
        return getattr(result, "rowcount", 0) or 0

    async def get_by_id(self, poll_id: int) -> Optional[Poll]:
        """Get a poll by ID with competitors and questions/options loaded."""
        result = await self.db.execute(
            select(Poll)
            .options(
                selectinload(Poll.competitors),
                selectinload(Poll.questions).selectinload(Question.options),
            )
            .where(Poll.id == poll_id)
        )
        return result.scalar_one_or_none()

    async def get_header(self, poll_id: int) -> Optional[Poll]:
        """Get a poll row without children."""
        result = await self.db.execute(select(Poll).where(Poll.id == poll_id))
        return result.scalar_one_or_none()

    async def exists(self, poll_id: int) -> bool:
        result = await self.db.execute(select(exists().where(Poll.id == poll_id)))
        return bool(result.scalar())

    async def list_opinion_polls(self) -> list[Poll]:
        """Polls with at least one non-competitor question, newest first."""
        has_opinion_question = exists().where(
            and_(Question.poll_id == Poll.id, Question.is_competitor_question.is_(False))
        )
        result = await self.db.execute(
            select(Poll).where(has_opinion_question).order_by(Poll.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_competitor_polls(self) -> list[Poll]:
        """Polls with competitors and no non-competitor question, newest first."""
        has_competitors = exists().where(Competitor.poll_id == Poll.id)
        has_opinion_question = exists().where(
            and_(Question.poll_id == Poll.id, Question.is_competitor_question.is_(False))
        )
        result = await self.db.execute(
            select(Poll)
            .options(
                selectinload(Poll.competitors),
                selectinload(Poll.questions).selectinload(Question.options),
            )
            .where(has_competitors, ~has_opinion_question)
            .order_by(Poll.created_at.desc())
        )
        return list(result.scalars().all())

    async def create(
        self,
        title: str,
        category: str,
        region: str,
        presidential: Optional[str] = None,
        county: Optional[str] = None,
        constituency: Optional[str] = None,
        ward: Optional[str] = None,
        voting_expires_at: Any = None,
        allow_multiple_votes: bool = False,
        published: bool = False,
    ) -> Poll:
        """Create a poll; missing location levels default to "All"."""
        poll = Poll(
            title=title,
            category=category,
            presidential=presidential,
            region=region,
            county=county or "All",
            constituency=constituency or "All",
            ward=ward or "All",
            voting_expires_at=voting_expires_at,
            allow_multiple_votes=allow_multiple_votes,
            published=published,
            total_votes=0,
            spoiled_votes=0,
        )
        self.db.add(poll)
        await self.db.flush()
        return poll

    async def add_competitor(
        self,
        poll_id: int,
        name: str,
        party: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ) -> Competitor:
        competitor = Competitor(
            poll_id=poll_id,
            name=name,
            party=party,
            profile_image_url=profile_image_url,
        )
        self.db.add(competitor)
        await self.db.flush()
        return competitor

    def _question_options(
        self,
        question_type: str,
        option_texts: Iterable[str],
        scale: Optional[int],
    ) -> list[Option]:
        if question_type == QuestionType.RATING:
            # Rating questions keep their scale as one JSON option
            return [Option(option_text=json.dumps({"min": 1, "max": scale or 5}))]
        if question_type in OPTION_QUESTION_TYPES:
            return [Option(option_text=text) for text in option_texts]
        return []

    async def add_question(
        self,
        poll_id: int,
        question_type: str,
        question_text: str,
        option_texts: Iterable[str] = (),
        is_competitor_question: bool = False,
        scale: Optional[int] = None,
    ) -> Question:
        """Insert a question together with the options its type owns."""
        question = Question(
            poll_id=poll_id,
            type=question_type,
            question_text=question_text,
            is_competitor_question=is_competitor_question,
            options=self._question_options(question_type, option_texts, scale),
        )
        self.db.add(question)
        await self.db.flush()
        return question

    async def update_question(
        self,
        question_id: int,
        question_type: str,
        question_text: str,
        option_texts: Iterable[str] = (),
        is_competitor_question: bool = False,
        scale: Optional[int] = None,
    ) -> bool:
        """Update a question in place and replace its options."""
        result = await self.db.execute(
            update(Question)
            .where(Question.id == question_id)
            .values(
                type=question_type,
                question_text=question_text,
                is_competitor_question=is_competitor_question,
            )
        )
        if self._get_rowcount(result) == 0:
            return False

        await self.db.execute(delete(Option).where(Option.question_id == question_id))
        for option in self._question_options(question_type, option_texts, scale):
            option.question_id = question_id
            self.db.add(option)
        await self.db.flush()
        return True

    async def get_question(self, poll_id: int, question_id: int) -> Optional[Question]:
        result = await self.db.execute(
            select(Question).where(Question.id == question_id, Question.poll_id == poll_id)
        )
        return result.scalar_one_or_none()

    async def set_published(self, poll_id: int, published: bool) -> bool:
        result = await self.db.execute(
            update(Poll).where(Poll.id == poll_id).values(published=published)
        )
        return self._get_rowcount(result) > 0

    async def delete(self, poll_id: int) -> bool:
        """Delete a poll; children go with it through ON DELETE CASCADE."""
        result = await self.db.execute(delete(Poll).where(Poll.id == poll_id))
        return self._get_rowcount(result) > 0
