from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.api.deps import get_current_user, get_realtime
from campusbuddy.core.database import get_db
from campusbuddy.schemas.campus_status import CampusStatusCreate, CampusStatusOut, CampusStatusUpdate, KeywordCount
from campusbuddy.schemas.common import ApiResponse
from campusbuddy.services import campus_status
from campusbuddy.services.realtime import RealtimeGateway
from campusbuddy.services.users import Caller

router = APIRouter()


@router.get("", response_model=ApiResponse[List[CampusStatusOut]])
async def list_statuses(
    facility: Optional[str] = Query(None),
    keyword: Optional[str] = Query(None),
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Most recently updated first"""
    return ApiResponse(data=await campus_status.list_statuses(db, facility=facility, keyword=keyword))


@router.get("/search/{query}", response_model=ApiResponse[List[CampusStatusOut]])
async def search_statuses(
    query: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await campus_status.search_statuses(db, query))


@router.get("/keywords/popular", response_model=ApiResponse[List[KeywordCount]])
async def popular_keywords(
    limit: Optional[str] = Query(None),
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await campus_status.popular_keywords(db, limit))


@router.get("/{status_id}", response_model=ApiResponse[CampusStatusOut])
async def get_status(
    status_id: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await campus_status.get_status(db, status_id))


@router.post("", response_model=ApiResponse[CampusStatusOut], status_code=status.HTTP_201_CREATED)
async def post_status(
    payload: CampusStatusCreate,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: RealtimeGateway = Depends(get_realtime)
):
    """Creates the facility's entry, or replaces it when one exists"""
    entry = await campus_status.post_status(db, current_user, payload, gateway)
    return ApiResponse(data=entry, message="Campus status updated successfully")


@router.put("/{status_id}", response_model=ApiResponse[CampusStatusOut])
async def update_status(
    status_id: str,
    payload: CampusStatusUpdate,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: RealtimeGateway = Depends(get_realtime)
):
    entry = await campus_status.update_status(db, current_user, status_id, payload, gateway)
    return ApiResponse(data=entry, message="Campus status updated successfully")


@router.delete("/{status_id}", response_model=ApiResponse)
async def delete_status(
    status_id: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await campus_status.delete_status(db, current_user, status_id)
    return ApiResponse(message="Campus status deleted successfully")
