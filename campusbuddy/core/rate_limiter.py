"""
Rate Limiting for the CampusBuddy API
=====================================
slowapi limiter keyed by the authenticated user when known, else by client IP.
Storage defaults to process memory; point RATE_LIMIT_STORAGE_URI at a shared
limits backend when running more than one instance.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from campusbuddy.core.config import settings
from campusbuddy.core.logging_config import logger


def get_user_identifier(request: Request) -> str:
    """
    Rate limit key:
    1. Authenticated user ID (set on request.state by the auth dependency)
    2. IP address
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Envelope-shaped 429 with a Retry-After hint"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "Too many requests. Please slow down.",
        },
        headers={
            "Retry-After": "60",
            "X-RateLimit-Limit": str(settings.RATE_LIMIT_PER_MINUTE),
        }
    )
