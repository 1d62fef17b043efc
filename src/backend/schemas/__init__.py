"""Schemas module initialization."""

from schemas.admin import BulkResponseUpsert, DemographicsUpsert, UpsertResult
from schemas.poll import PollCreate, PollDetail, PollListItem, QuizCreate, QuizUpdate
from schemas.response import ResponseSubmission, SubmissionAccepted, VoteStatus
from schemas.results import PollResults
from schemas.vote import CompetitorVoteCreate, CompetitorPollResults, VoteRecorded

__all__ = [
    "BulkResponseUpsert",
    "DemographicsUpsert",
    "UpsertResult",
    "PollCreate",
    "PollDetail",
    "PollListItem",
    "QuizCreate",
    "QuizUpdate",
    "ResponseSubmission",
    "SubmissionAccepted",
    "VoteStatus",
    "PollResults",
    "CompetitorVoteCreate",
    "CompetitorPollResults",
    "VoteRecorded",
]
