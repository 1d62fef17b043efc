"""Database models module."""

from models.admin_override import AdminBulkResponse, AdminDemographics
from models.poll import Competitor, Option, Poll, Question, QuestionType
from models.response import PollResponse, RankingEntry
from models.vote import Vote, VoteHistory

__all__ = [
    "Poll",
    "Competitor",
    "Question",
    "Option",
    "QuestionType",
    "PollResponse",
    "RankingEntry",
    "AdminBulkResponse",
    "AdminDemographics",
    "Vote",
    "VoteHistory",
]
