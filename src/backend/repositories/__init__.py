"""Repository modules for database access."""

from repositories.admin_override_repository import AdminOverrideRepository
from repositories.filters import LocationFilter
from repositories.poll_repository import PollRepository
from repositories.response_repository import ResponseRepository
from repositories.vote_repository import VoteRepository

__all__ = [
    "AdminOverrideRepository",
    "LocationFilter",
    "PollRepository",
    "ResponseRepository",
    "VoteRepository",
]
