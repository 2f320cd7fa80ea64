"""
Chat REST endpoints.

Same rules as the realtime `message:*` events: both call services.chat with
the gateway as broadcaster.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.api.deps import get_current_user, get_realtime
from campusbuddy.core.database import get_db
from campusbuddy.schemas.chat import (
    ChatSummaryOut,
    MessageCreate,
    MessageOut,
    MessageUpdate,
    ReactionRequest,
    SummaryRequest,
)
from campusbuddy.schemas.common import ApiResponse, PaginatedResponse
from campusbuddy.services import chat
from campusbuddy.services.realtime import RealtimeGateway
from campusbuddy.services.users import Caller

router = APIRouter()


@router.get("/messages", response_model=ApiResponse[PaginatedResponse[MessageOut]])
async def list_messages(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    before: Optional[str] = Query(None),
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await chat.list_messages(db, page, limit, before))


@router.post("/messages", response_model=ApiResponse[MessageOut], status_code=status.HTTP_201_CREATED)
async def send_message(
    payload: MessageCreate,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: RealtimeGateway = Depends(get_realtime)
):
    message = await chat.send_message(db, current_user, payload.content, gateway)
    return ApiResponse(data=message, message="Message sent successfully")


@router.put("/messages/{message_id}", response_model=ApiResponse[MessageOut])
async def edit_message(
    message_id: str,
    payload: MessageUpdate,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: RealtimeGateway = Depends(get_realtime)
):
    message = await chat.edit_message(db, current_user, message_id, payload.content, gateway)
    return ApiResponse(data=message, message="Message updated successfully")


@router.delete("/messages/{message_id}", response_model=ApiResponse)
async def delete_message(
    message_id: str,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: RealtimeGateway = Depends(get_realtime)
):
    await chat.delete_message(db, current_user, message_id, gateway)
    return ApiResponse(message="Message deleted successfully")


@router.post("/messages/{message_id}/reactions", response_model=ApiResponse[MessageOut])
async def react_to_message(
    message_id: str,
    payload: ReactionRequest,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: RealtimeGateway = Depends(get_realtime)
):
    message = await chat.react_to_message(db, current_user, message_id, payload.emoji, gateway)
    return ApiResponse(data=message)


@router.post("/summary", response_model=ApiResponse[ChatSummaryOut])
async def generate_summary(
    payload: SummaryRequest,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Templated report over recent messages; stored for later listing"""
    summary = await chat.generate_summary(db, payload)
    return ApiResponse(data=summary, message="Summary generated successfully")


@router.get("/summaries", response_model=ApiResponse[List[ChatSummaryOut]])
async def list_summaries(
    limit: Optional[str] = Query(None),
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return ApiResponse(data=await chat.list_summaries(db, limit))
