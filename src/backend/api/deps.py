"""
Shared dependencies for API endpoints.

Includes:
- Query parameter helpers (repeated values collapse to the first)
- Location filter for results endpoints
- Domain error translation
- Rate limiting (per client IP)
"""

from typing import Optional

import structlog
from fastapi import Depends, HTTPException, Request, status

from core.config import settings
from core.exceptions import PollingError
from repositories.filters import LocationFilter
from services.rate_limit_service import RateLimitService, get_rate_limit_service

logger = structlog.get_logger(__name__)


# =============================================================================
# Helper Functions
# =============================================================================


def first_query_value(request: Request, name: str) -> Optional[str]:
    """
    First value of a query parameter, or None when absent or blank.

    `?ward=a&ward=b` reads as "a".
    """
    values = request.query_params.getlist(name)
    if not values:
        return None
    value = values[0].strip()
    return value or None


def get_location_filter(request: Request) -> LocationFilter:
    """Build the results location filter from the query string."""
    return LocationFilter(
        county=first_query_value(request, "county"),
        constituency=first_query_value(request, "constituency"),
        ward=first_query_value(request, "ward"),
    )


def http_error(exc: PollingError) -> HTTPException:
    """Translate a domain exception into the matching HTTP error."""
    return HTTPException(status_code=exc.status_code, detail=exc.message)


# =============================================================================
# Rate Limiting
# =============================================================================


class RateLimiter:
    """
    Rate limiter dependency for API endpoints.

    Fixed window per client IP, counted in-process.
    """

    def __init__(
        self,
        requests: int = 60,
        window_seconds: int = 60,
        key_prefix: str = "api",
    ):
        self.requests = requests
        self.window_seconds = window_seconds
        self.key_prefix = key_prefix

    async def __call__(
        self,
        request: Request,
        limiter: RateLimitService = Depends(get_rate_limit_service),
    ) -> None:
        """
        Check rate limit for the current request.

        Raises HTTPException 429 if rate limit exceeded.
        """
        identifier = self._get_identifier(request)
        key = f"{self.key_prefix}:{identifier}"

        is_allowed, remaining, retry_after = await limiter.check_rate_limit(
            identifier=key,
            limit=self.requests,
            window_seconds=self.window_seconds,
        )

        if not is_allowed:
            logger.warning(
                "rate_limit_exceeded",
                identifier=identifier[:20],
                limit=self.requests,
                window_seconds=self.window_seconds,
            )
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later.",
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(self.requests),
                    "X-RateLimit-Remaining": "0",
                },
            )

        request.state.rate_limit_remaining = remaining
        request.state.rate_limit_limit = self.requests

    def _get_identifier(self, request: Request) -> str:
        """Get unique identifier for rate limiting."""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            # First IP in chain is the client
            ip = forwarded.split(",")[0].strip()
        else:
            ip = request.client.host if request.client else "unknown"

        return f"ip:{ip}"


# Pre-configured rate limiters
rate_limit_vote = RateLimiter(
    requests=settings.VOTE_RATE_LIMIT_REQUESTS,
    window_seconds=settings.VOTE_RATE_LIMIT_WINDOW_SECONDS,
    key_prefix="vote",
)
rate_limit_opinion_vote = RateLimiter(
    requests=settings.VOTE_RATE_LIMIT_REQUESTS,
    window_seconds=settings.VOTE_RATE_LIMIT_WINDOW_SECONDS,
    key_prefix="opinion-vote",
)
