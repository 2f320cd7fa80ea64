from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.api.deps import get_current_user
from campusbuddy.core.database import get_db
from campusbuddy.schemas.common import ApiResponse, PaginatedResponse
from campusbuddy.schemas.user import ProfileUpdate, UserOut
from campusbuddy.services import users
from campusbuddy.services.users import Caller

router = APIRouter()


@router.get("", response_model=ApiResponse[PaginatedResponse[UserOut]])
async def list_users(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    batch: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Users by points, filterable by batch and role"""
    result = await users.list_users(db, page, limit, batch=batch, role=role)
    return ApiResponse(data=result)


@router.get("/leaderboard/points", response_model=ApiResponse[List[UserOut]])
async def leaderboard(
    limit: Optional[str] = Query(None),
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await users.leaderboard(db, limit))


@router.get("/search/{query}", response_model=ApiResponse[List[UserOut]])
async def search_users(
    query: str,
    limit: Optional[str] = Query(None),
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await users.search_users(db, query, limit))


@router.put("/profile", response_model=ApiResponse[UserOut])
async def update_profile(
    payload: ProfileUpdate,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    profile = await users.update_profile(db, current_user, payload)
    return ApiResponse(data=profile, message="Profile updated successfully")


@router.get("/{user_id}", response_model=ApiResponse[UserOut])
async def get_user(
    user_id: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await users.get_user(db, user_id))
