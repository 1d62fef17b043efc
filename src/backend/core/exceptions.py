"""
Domain exceptions for the polling service.

Services raise these; route handlers translate them into HTTP responses
via `status_code`.
"""

from fastapi import status


class PollingError(Exception):
    """Base exception for polling operations."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidSubmissionError(PollingError):
    """Request payload is missing required fields or is malformed."""

    status_code = status.HTTP_400_BAD_REQUEST


class VotingClosedError(PollingError):
    """The poll's voting window has expired."""

    status_code = status.HTTP_400_BAD_REQUEST


class CompetitorNotFoundError(PollingError):
    """Competitor does not belong to the poll."""

    status_code = status.HTTP_400_BAD_REQUEST


class PollNotFoundError(PollingError):
    """Poll does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, poll_id: int):
        super().__init__("Poll not found.")
        self.poll_id = poll_id


class QuestionNotFoundError(PollingError):
    """Question does not exist or belongs to another poll."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, question_id: int):
        super().__init__("Question not found for this poll.")
        self.question_id = question_id


class AlreadyVotedError(PollingError):
    """The voter already has a recorded submission for a single-vote poll."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, poll_id: int, voter_id: str):
        super().__init__("You have already voted in this poll.")
        self.poll_id = poll_id
        self.voter_id = voter_id
