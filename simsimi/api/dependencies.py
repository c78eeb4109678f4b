"""
Request dependencies shared by the routers.

Collaborators live on app.state and are resolved per request, so tests
can build an app with their own settings, store and rate limiter.
"""
from datetime import datetime, timedelta
import math

from fastapi import Request, Response

from simsimi.core.exceptions import RateLimitExceeded
from simsimi.core.rate_limiter import RateLimiter
from simsimi.services.conversation_service import ConversationService


def get_conversation_service(request: Request) -> ConversationService:
    return request.app.state.conversation_service


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def client_address(request: Request) -> str:
    return request.client.host if request.client else ""


def enforce_rate_limit(request: Request, response: Response) -> None:
    """
    Apply the per-client sliding window and set the X-RateLimit headers.

    Raises:
        RateLimitExceeded: When the client has used up its window
    """
    limiter = get_rate_limiter(request)
    identifier = client_address(request) or "unknown"

    is_allowed, remaining = limiter.is_allowed(identifier)

    response.headers["X-RateLimit-Limit"] = str(limiter.limit)
    response.headers["X-RateLimit-Remaining"] = str(remaining)
    response.headers["X-RateLimit-Reset"] = (
        datetime.utcnow() + timedelta(seconds=limiter.window)
    ).isoformat()

    if not is_allowed:
        retry_after = max(1, math.ceil(limiter.get_reset_after(identifier)))
        raise RateLimitExceeded(retry_after=retry_after)
