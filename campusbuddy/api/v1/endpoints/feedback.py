"""
Anonymous feedback endpoints.

Submission takes no credentials and stores nothing that identifies the
sender. Reading, voting and moderation require a signed-in user.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.api.deps import get_current_user, require_roles
from campusbuddy.core.database import get_db
from campusbuddy.models.user import UserRole
from campusbuddy.schemas.common import ApiResponse, PaginatedResponse
from campusbuddy.schemas.feedback import FeedbackCreate, FeedbackOut, FeedbackStatusUpdate, VoteRequest
from campusbuddy.services import feedback
from campusbuddy.services.users import Caller

router = APIRouter()


@router.get("", response_model=ApiResponse[PaginatedResponse[FeedbackOut]])
async def list_feedback(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await feedback.list_feedback(
        db, current_user, page, limit, type=type, category=category, status=status
    )
    return ApiResponse(data=result)


@router.get("/{feedback_id}", response_model=ApiResponse[FeedbackOut])
async def get_feedback(
    feedback_id: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await feedback.get_feedback(db, current_user, feedback_id))


@router.post("", response_model=ApiResponse[FeedbackOut], status_code=status.HTTP_201_CREATED)
async def submit_feedback(payload: FeedbackCreate, db: AsyncSession = Depends(get_db)):
    item = await feedback.submit_feedback(db, payload)
    return ApiResponse(data=item, message="Feedback submitted anonymously")


@router.put("/{feedback_id}/status", response_model=ApiResponse[FeedbackOut])
async def update_status(
    feedback_id: str,
    payload: FeedbackStatusUpdate,
    current_user: Caller = Depends(require_roles(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db)
):
    item = await feedback.update_status(db, current_user, feedback_id, payload.status)
    return ApiResponse(data=item, message="Feedback status updated successfully")


@router.post("/{feedback_id}/vote", response_model=ApiResponse[FeedbackOut])
async def vote(
    feedback_id: str,
    payload: VoteRequest,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await feedback.vote(db, current_user, feedback_id, payload.vote_type))


@router.delete("/{feedback_id}", response_model=ApiResponse)
async def delete_feedback(
    feedback_id: str,
    current_user: Caller = Depends(require_roles(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db)
):
    await feedback.delete_feedback(db, current_user, feedback_id)
    return ApiResponse(message="Feedback deleted successfully")
