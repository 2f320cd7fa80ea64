from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.api.deps import get_current_user, get_realtime, require_roles
from campusbuddy.core.database import get_db
from campusbuddy.models.user import UserRole
from campusbuddy.schemas.badge import ActivityOut, AutomaticCheckResult, AwardRequest, BadgeCreate, BadgeOut
from campusbuddy.schemas.common import ApiResponse
from campusbuddy.schemas.user import EarnedBadge
from campusbuddy.services import badges
from campusbuddy.services.realtime import RealtimeGateway
from campusbuddy.services.users import Caller

router = APIRouter()


@router.get("", response_model=ApiResponse[List[BadgeOut]])
async def list_badges(
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await badges.list_badges(db))


@router.get("/user/{user_id}", response_model=ApiResponse[List[EarnedBadge]])
async def user_badges(
    user_id: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await badges.user_badges(db, current_user, user_id))


@router.get("/activities/{user_id}", response_model=ApiResponse[List[ActivityOut]])
async def user_activities(
    user_id: str,
    limit: Optional[str] = Query(None),
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await badges.user_activities(db, current_user, user_id, limit))


@router.post("", response_model=ApiResponse[BadgeOut], status_code=status.HTTP_201_CREATED)
async def create_badge(
    payload: BadgeCreate,
    current_user: Caller = Depends(require_roles(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db)
):
    badge = await badges.create_badge(db, current_user, payload)
    return ApiResponse(data=badge, message="Badge created successfully")


@router.post("/award", response_model=ApiResponse[EarnedBadge])
async def award_badge(
    payload: AwardRequest,
    current_user: Caller = Depends(require_roles(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
    gateway: RealtimeGateway = Depends(get_realtime)
):
    earned = await badges.award(db, current_user, payload, gateway)
    return ApiResponse(data=earned, message="Badge awarded successfully")


@router.post("/check-automatic", response_model=ApiResponse[AutomaticCheckResult])
async def check_automatic(
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: RealtimeGateway = Depends(get_realtime)
):
    """Award every rule badge the caller now qualifies for"""
    result = await badges.check_automatic(db, current_user, gateway)
    return ApiResponse(data=result)
