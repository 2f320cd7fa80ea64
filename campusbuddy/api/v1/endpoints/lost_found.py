from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.api.deps import get_current_user
from campusbuddy.core.database import get_db
from campusbuddy.schemas.common import ApiResponse, PaginatedResponse
from campusbuddy.schemas.lost_found import LostFoundCreate, LostFoundOut, LostFoundUpdate
from campusbuddy.services import lost_found
from campusbuddy.services.users import Caller

router = APIRouter()


@router.get("", response_model=ApiResponse[PaginatedResponse[LostFoundOut]])
async def list_items(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await lost_found.list_items(db, page, limit, status=status, category=category, search=search)
    return ApiResponse(data=result)


@router.get("/{item_id}", response_model=ApiResponse[LostFoundOut])
async def get_item(
    item_id: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await lost_found.get_item(db, item_id))


@router.post("", response_model=ApiResponse[LostFoundOut], status_code=status.HTTP_201_CREATED)
async def report_item(
    payload: LostFoundCreate,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    item = await lost_found.report_item(db, current_user, payload)
    return ApiResponse(data=item, message="Item reported successfully")


@router.put("/{item_id}", response_model=ApiResponse[LostFoundOut])
async def update_item(
    item_id: str,
    payload: LostFoundUpdate,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    item = await lost_found.update_item(db, current_user, item_id, payload)
    return ApiResponse(data=item, message="Item updated successfully")


@router.post("/{item_id}/return", response_model=ApiResponse[LostFoundOut])
async def mark_returned(
    item_id: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Terminal: a returned item cannot be returned again"""
    item = await lost_found.mark_returned(db, current_user, item_id)
    return ApiResponse(data=item, message="Item marked as returned")


@router.delete("/{item_id}", response_model=ApiResponse)
async def delete_item(
    item_id: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await lost_found.delete_item(db, current_user, item_id)
    return ApiResponse(message="Item deleted successfully")
