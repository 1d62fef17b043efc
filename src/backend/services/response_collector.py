"""
Response collector.

Stores one voter's full set of answers to an opinion poll: one ranking row
per ranked option plus exactly one aggregate response row, in a single
transaction.
"""

from typing import Iterable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import (
    AlreadyVotedError,
    InvalidSubmissionError,
    PollNotFoundError,
    VotingClosedError,
)
from models.poll import QuestionType
from repositories.poll_repository import PollRepository
from repositories.response_repository import ResponseRepository
from schemas.response import ResponseItem, ResponseSubmission
from services.answers import (
    AnswerBuffers,
    LocationAnswer,
    MediaAnswer,
    OpenEndedAnswer,
    RatingAnswer,
    is_valid_rating,
)

logger = structlog.get_logger(__name__)

RankingRow = tuple[int, int, int]


def split_answers(items: Iterable[ResponseItem]) -> tuple[list[RankingRow], AnswerBuffers]:
    """
    Route each answer either to ranking rows or to the per-category buffers.

    Ranking positions are 1-based in the order given; a repeated option id
    keeps its first position so a voter's positions stay 1..N without gaps.
    Ratings outside the accepted range are dropped.
    """
    ranking: list[RankingRow] = []
    buffers = AnswerBuffers()

    for item in items:
        if item.type == QuestionType.RANKING:
            ordered = list(dict.fromkeys(item.selected_option_ids or []))
            ranking.extend(
                (item.question_id, option_id, position)
                for position, option_id in enumerate(ordered, start=1)
            )
            continue

        if item.selected_option_ids:
            buffers.selected_option_ids.extend(item.selected_option_ids)
        if item.selected_competitor_ids:
            buffers.selected_competitor_ids.extend(item.selected_competitor_ids)

        if item.type == QuestionType.OPEN_ENDED:
            text = (item.open_ended_response or "").strip()
            if text:
                buffers.open_ended.append(OpenEndedAnswer(item.question_id, text))

        elif item.type == QuestionType.RATING:
            if item.rating is not None and is_valid_rating(item.rating):
                buffers.ratings.append(RatingAnswer(item.question_id, int(item.rating)))

        elif item.type == QuestionType.IMAGE_UPLOAD:
            url = (item.image_url or "").strip()
            if url:
                buffers.images.append(MediaAnswer(item.question_id, url))

        elif item.type == QuestionType.AUDIO_RECORDING:
            url = (item.audio_url or "").strip()
            if url:
                buffers.audio.append(MediaAnswer(item.question_id, url))

        elif item.type == QuestionType.LOCATION:
            if item.latitude is not None and item.longitude is not None:
                buffers.locations.append(
                    LocationAnswer(item.question_id, item.latitude, item.longitude)
                )

    return ranking, buffers


class ResponseCollector:
    """Validates and persists opinion-poll submissions."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.polls = PollRepository(db)
        self.responses = ResponseRepository(db)

    async def submit(self, poll_id: int, submission: ResponseSubmission) -> int:
        """
        Store a submission and return the new response row id.

        Raises:
            InvalidSubmissionError: bad poll id
            PollNotFoundError: unknown poll
            VotingClosedError: voting window has passed
            AlreadyVotedError: the voter already has a row and the poll
                disallows multiple votes
        """
        if poll_id < 1:
            raise InvalidSubmissionError("Invalid poll id.")

        poll = await self.polls.get_header(poll_id)
        if poll is None:
            raise PollNotFoundError(poll_id)
        if poll.is_expired:
            raise VotingClosedError("Voting for this poll has closed.")

        ranking, buffers = split_answers(submission.responses)
        voter = submission.user_identifier

        try:
            await self.responses.insert_ranking_entries(poll_id, voter, ranking)
            response_id = await self.responses.insert_response(
                poll_id=poll_id,
                user_identifier=voter,
                is_exclusive=not poll.allow_multiple_votes,
                values={
                    **buffers.column_values(),
                    "respondent_name": submission.respondent_name,
                    "respondent_age": submission.respondent_age,
                    "respondent_gender": submission.respondent_gender,
                    "region": submission.region,
                    "county": submission.county,
                    "constituency": submission.constituency,
                    "ward": submission.ward,
                },
            )
            if response_id is None:
                raise AlreadyVotedError(poll_id, voter)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "opinion_response_stored",
            poll_id=poll_id,
            response_id=response_id,
            ranking_rows=len(ranking),
        )
        return response_id

    async def has_voted(self, poll_id: int, user_identifier: str) -> bool:
        if not await self.polls.exists(poll_id):
            raise PollNotFoundError(poll_id)
        return await self.responses.has_voted(poll_id, user_identifier)
