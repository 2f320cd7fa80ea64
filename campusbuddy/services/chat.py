"""
Chat commands.

The REST endpoints and the realtime gateway both call these functions, so
send/edit/delete/react validate, authorize, reward and broadcast the same way
whichever entry point a client uses.
"""
from typing import Any, List, Optional, Protocol

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.core.exceptions import AuthorizationError, DependencyUnavailableError, ValidationError
from campusbuddy.core.logging_config import logger
from campusbuddy.core.types import now_ms, temporary_id
from campusbuddy.models.badge import ActivityType
from campusbuddy.models.message import ChatSummary, Message
from campusbuddy.schemas.chat import ChatSummaryOut, MessageOut, SummaryRequest
from campusbuddy.schemas.common import PaginatedResponse, build_page
from campusbuddy.services import effects, store
from campusbuddy.services.chat_summary import SummaryLine, render_summary
from campusbuddy.services.gamification import POINTS
from campusbuddy.services.reactions import toggle_reaction
from campusbuddy.services.users import Caller
from campusbuddy.services.validation import coerce_int, page_params, require_text

MESSAGE_RECEIVE = "message:receive"
MESSAGE_DELETE = "message:delete"

MAX_SUMMARY_WINDOW = 200


class Broadcaster(Protocol):
    async def broadcast(self, event: str, data: Any, exclude_user: Optional[str] = None) -> None:
        ...


def _payload(message: MessageOut) -> dict:
    return message.model_dump(mode="json", by_alias=True)


async def _publish(broadcaster: Optional[Broadcaster], event: str, data: Any) -> None:
    if broadcaster is not None:
        await broadcaster.broadcast(event, data)


async def list_messages(session: AsyncSession, page=None, limit=None, before=None) -> PaginatedResponse:
    """Newest page first; messages inside a page in chronological order"""
    page, limit = page_params(page, limit, default_limit=50)

    filters = []
    if before is not None and str(before).strip():
        filters.append(Message.timestamp < coerce_int(before, now_ms()))

    try:
        total = await session.scalar(select(func.count()).select_from(Message).where(*filters))
        result = await session.execute(
            select(Message)
            .where(*filters)
            .order_by(Message.timestamp.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        messages = [MessageOut.model_validate(m) for m in result.scalars().all()]
    except SQLAlchemyError as e:
        logger.log_effect_failure("list_messages", e)
        return build_page([], 0, page, limit)

    messages.reverse()
    return build_page(messages, total or 0, page, limit)


async def send_message(
    session: AsyncSession,
    caller: Caller,
    content: Any,
    broadcaster: Optional[Broadcaster] = None,
) -> MessageOut:
    text = require_text(content, "Message content is required", "content")

    message = Message(
        content=text,
        author_id=caller.id,
        author_name=caller.name,
        author_batch=caller.batch,
        timestamp=now_ms(),
        edited=False,
        reactions=[],
    )

    try:
        session.add(message)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_effect_failure("send_message", e, target_user=caller.id)
        message.id = temporary_id("msg")
        return MessageOut.model_validate(message)

    sent = MessageOut.model_validate(message)
    await effects.reward(session, caller.id, POINTS["message"], ActivityType.MESSAGE, "Sent a chat message")
    await _publish(broadcaster, MESSAGE_RECEIVE, _payload(sent))
    return sent


async def edit_message(
    session: AsyncSession,
    caller: Caller,
    message_id: str,
    content: Any,
    broadcaster: Optional[Broadcaster] = None,
) -> MessageOut:
    text = require_text(content, "Message content is required", "content")

    message = await store.fetch_or_404(session, Message, message_id, "Message")
    if message.author_id != caller.id:
        raise AuthorizationError("You can only edit your own messages")

    message.content = text
    message.edited = True
    message.edited_at = now_ms()
    await store.commit(session, "edit_message")

    edited = MessageOut.model_validate(message)
    await _publish(broadcaster, MESSAGE_RECEIVE, _payload(edited))
    return edited


async def delete_message(
    session: AsyncSession,
    caller: Caller,
    message_id: str,
    broadcaster: Optional[Broadcaster] = None,
) -> str:
    message = await store.fetch_or_404(session, Message, message_id, "Message")
    if message.author_id != caller.id and not caller.is_admin:
        raise AuthorizationError("You can only delete your own messages")

    await store.delete_with(session, message, context="delete_message")
    await _publish(broadcaster, MESSAGE_DELETE, {"messageId": message_id})
    return message_id


async def react_to_message(
    session: AsyncSession,
    caller: Caller,
    message_id: str,
    emoji: Any,
    broadcaster: Optional[Broadcaster] = None,
) -> MessageOut:
    symbol = require_text(emoji, "Emoji is required", "emoji")

    message = await store.fetch_or_404(session, Message, message_id, "Message")
    # Reassign so the JSON column registers the change
    message.reactions = toggle_reaction(message.reactions, symbol, caller.id)
    await store.commit(session, "react_to_message")

    reacted = MessageOut.model_validate(message)
    await _publish(broadcaster, MESSAGE_RECEIVE, _payload(reacted))
    return reacted


async def generate_summary(session: AsyncSession, request: SummaryRequest) -> ChatSummaryOut:
    """Templated report over the newest messages in the window, stored for later"""
    window = min(coerce_int(request.message_count, 50), MAX_SUMMARY_WINDOW)

    query = select(Message).order_by(Message.timestamp.desc())
    if request.start_time is not None and request.end_time is not None:
        if request.start_time > request.end_time:
            raise ValidationError("startTime must not be after endTime", "startTime")
        query = query.where(
            Message.timestamp >= request.start_time,
            Message.timestamp <= request.end_time,
        )

    try:
        result = await session.execute(query.limit(window))
        messages = list(result.scalars().all())
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_error_with_context(e, "generate_summary")
        raise DependencyUnavailableError(store.UNAVAILABLE)

    if not messages:
        raise ValidationError("No messages found in the specified time range")

    lines = [
        SummaryLine(m.author_name, m.author_batch, m.content, m.timestamp)
        for m in messages
    ]
    timestamps = [line.timestamp for line in lines]

    summary = ChatSummary(
        summary=render_summary(lines),
        message_count=len(lines),
        time_range={
            "start": request.start_time if request.start_time is not None else min(timestamps),
            "end": request.end_time if request.end_time is not None else max(timestamps),
        },
        generated_at=now_ms(),
    )
    session.add(summary)
    await store.commit(session, "store_summary")
    return ChatSummaryOut.model_validate(summary)


async def list_summaries(session: AsyncSession, limit=None) -> List[ChatSummaryOut]:
    limit = min(coerce_int(limit, 10), 100)
    try:
        result = await session.execute(
            select(ChatSummary).order_by(ChatSummary.generated_at.desc()).limit(limit)
        )
    except SQLAlchemyError as e:
        logger.log_effect_failure("list_summaries", e)
        return []
    return [ChatSummaryOut.model_validate(s) for s in result.scalars().all()]
