from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.api.deps import get_current_user
from campusbuddy.core.database import get_db
from campusbuddy.schemas.common import ApiResponse, PaginatedResponse
from campusbuddy.schemas.mood import MoodCreate, MoodFeedback, MoodOut, MoodStats
from campusbuddy.services import mood
from campusbuddy.services.users import Caller

router = APIRouter()


@router.get("", response_model=ApiResponse[PaginatedResponse[MoodOut]])
async def list_entries(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await mood.list_entries(db, current_user, user_id, page, limit)
    return ApiResponse(data=result)


@router.get("/stats", response_model=ApiResponse[MoodStats])
async def mood_stats(
    days: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await mood.mood_stats(db, current_user, user_id, days))


@router.post("", response_model=ApiResponse[MoodOut], status_code=status.HTTP_201_CREATED)
async def record_mood(
    payload: MoodCreate,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    entry = await mood.record_mood(db, current_user, payload.mood)
    return ApiResponse(data=entry, message="Mood recorded successfully")


@router.post("/{entry_id}/feedback", response_model=ApiResponse[MoodOut])
async def rate_tip(
    entry_id: str,
    payload: MoodFeedback,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    entry = await mood.rate_tip(db, current_user, entry_id, payload.helpful)
    return ApiResponse(data=entry, message="Feedback recorded successfully")


@router.delete("/{entry_id}", response_model=ApiResponse)
async def delete_entry(
    entry_id: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await mood.delete_entry(db, current_user, entry_id)
    return ApiResponse(message="Mood entry deleted successfully")
