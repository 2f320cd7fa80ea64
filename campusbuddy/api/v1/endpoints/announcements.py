from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.api.deps import get_current_user, get_realtime, require_roles
from campusbuddy.core.database import get_db
from campusbuddy.models.user import UserRole
from campusbuddy.schemas.announcement import AnnouncementCreate, AnnouncementOut, AnnouncementUpdate, LikeResult
from campusbuddy.schemas.common import ApiResponse, PaginatedResponse
from campusbuddy.services import announcements
from campusbuddy.services.realtime import RealtimeGateway
from campusbuddy.services.users import Caller

router = APIRouter()


@router.get("", response_model=ApiResponse[PaginatedResponse[AnnouncementOut]])
async def list_announcements(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    society: Optional[str] = Query(None),
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Unexpired announcements, newest first"""
    result = await announcements.list_announcements(db, page, limit, priority=priority, society=society)
    return ApiResponse(data=result)


@router.get("/{announcement_id}", response_model=ApiResponse[AnnouncementOut])
async def get_announcement(
    announcement_id: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Counts a view"""
    return ApiResponse(data=await announcements.get_announcement(db, announcement_id))


@router.post("", response_model=ApiResponse[AnnouncementOut], status_code=status.HTTP_201_CREATED)
async def create_announcement(
    payload: AnnouncementCreate,
    current_user: Caller = Depends(require_roles(UserRole.ADMIN, UserRole.SOCIETY_HEAD)),
    db: AsyncSession = Depends(get_db),
    gateway: RealtimeGateway = Depends(get_realtime)
):
    announcement = await announcements.create_announcement(db, current_user, payload, gateway)
    return ApiResponse(data=announcement, message="Announcement created successfully")


@router.put("/{announcement_id}", response_model=ApiResponse[AnnouncementOut])
async def update_announcement(
    announcement_id: str,
    payload: AnnouncementUpdate,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    announcement = await announcements.update_announcement(db, current_user, announcement_id, payload)
    return ApiResponse(data=announcement, message="Announcement updated successfully")


@router.delete("/{announcement_id}", response_model=ApiResponse)
async def delete_announcement(
    announcement_id: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await announcements.delete_announcement(db, current_user, announcement_id)
    return ApiResponse(message="Announcement deleted successfully")


@router.post("/{announcement_id}/like", response_model=ApiResponse[LikeResult])
async def toggle_like(
    announcement_id: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await announcements.toggle_like(db, current_user, announcement_id))
