from fastapi import APIRouter

from campusbuddy.api.v1.endpoints import (
    announcements,
    auth,
    badges,
    chat,
    feedback,
    lost_found,
    mood,
    realtime,
    status,
    users,
)
from campusbuddy.core.config import settings
from campusbuddy.core.types import now_ms

api_router = APIRouter()


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check endpoint for load balancer"""
    return {"success": True, "data": {"status": "healthy", "service": settings.APP_NAME, "timestamp": now_ms()}}


api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(chat.router, prefix="/chat", tags=["Chat"])
api_router.include_router(announcements.router, prefix="/announcements", tags=["Announcements"])
api_router.include_router(lost_found.router, prefix="/lost-found", tags=["Lost & Found"])
api_router.include_router(feedback.router, prefix="/feedback", tags=["Feedback"])
api_router.include_router(mood.router, prefix="/mood", tags=["Mood"])
api_router.include_router(status.router, prefix="/status", tags=["Campus Status"])
api_router.include_router(badges.router, prefix="/badges", tags=["Badges"])
api_router.include_router(realtime.router, tags=["Realtime"])
