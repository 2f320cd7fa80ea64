"""
Anonymous feedback, complaints and confessions.

Visibility: admins see everything. Everyone else sees confessions in any
status, and feedback/complaints only once resolved.
"""
from typing import Optional

from sqlalchemy import select, func, or_, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.core.exceptions import AuthorizationError, DependencyUnavailableError
from campusbuddy.core.logging_config import logger
from campusbuddy.core.types import now_ms, temporary_id
from campusbuddy.models.feedback import (
    AnonymousFeedback,
    FeedbackPriority,
    FeedbackStatus,
    FeedbackType,
    FeedbackVote,
    VoteType,
)
from campusbuddy.schemas.common import PaginatedResponse, build_page
from campusbuddy.schemas.feedback import FeedbackCreate, FeedbackOut
from campusbuddy.services import store
from campusbuddy.services.users import Caller
from campusbuddy.services.validation import (
    optional_choice,
    page_params,
    require_choice,
    require_fields,
)
from campusbuddy.services.voting import apply_vote

DEFAULT_CATEGORY = "general"


def visible_to_public():
    return or_(
        AnonymousFeedback.type == FeedbackType.CONFESSION,
        AnonymousFeedback.status == FeedbackStatus.RESOLVED,
    )


def is_visible(item: AnonymousFeedback, caller: Caller) -> bool:
    if caller.is_admin:
        return True
    return item.type == FeedbackType.CONFESSION or item.status == FeedbackStatus.RESOLVED


async def list_feedback(
    session: AsyncSession,
    caller: Caller,
    page=None,
    limit=None,
    type: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
) -> PaginatedResponse:
    page, limit = page_params(page, limit, default_limit=20)

    filters = []
    if type:
        filters.append(AnonymousFeedback.type == require_choice(
            type, FeedbackType, "Type must be feedback, complaint, or confession", "type"))
    if category:
        filters.append(AnonymousFeedback.category == category)
    if status:
        filters.append(AnonymousFeedback.status == require_choice(status, FeedbackStatus, "Invalid status", "status"))
    if not caller.is_admin:
        filters.append(visible_to_public())

    try:
        total = await session.scalar(select(func.count()).select_from(AnonymousFeedback).where(*filters))
        result = await session.execute(
            select(AnonymousFeedback)
            .where(*filters)
            .order_by(AnonymousFeedback.timestamp.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = [FeedbackOut.model_validate(f) for f in result.scalars().all()]
    except SQLAlchemyError as e:
        logger.log_effect_failure("list_feedback", e)
        return build_page([], 0, page, limit)

    return build_page(items, total or 0, page, limit)


async def get_feedback(session: AsyncSession, caller: Caller, feedback_id: str) -> FeedbackOut:
    item = await store.fetch_or_404(session, AnonymousFeedback, feedback_id, "Feedback")
    if not is_visible(item, caller):
        raise AuthorizationError("Access denied")
    return FeedbackOut.model_validate(item)


async def submit_feedback(session: AsyncSession, payload: FeedbackCreate) -> FeedbackOut:
    """No caller: submissions are anonymous by construction"""
    require_fields("Type, title, and content are required",
                   type=payload.type, title=payload.title, content=payload.content)
    feedback_type = require_choice(payload.type, FeedbackType, "Type must be feedback, complaint, or confession", "type")
    priority = optional_choice(payload.priority, FeedbackPriority, FeedbackPriority.MEDIUM, "Invalid priority", "priority")

    item = AnonymousFeedback(
        type=feedback_type,
        category=(payload.category or "").strip() or DEFAULT_CATEGORY,
        title=payload.title.strip(),
        content=payload.content.strip(),
        priority=priority,
        status=FeedbackStatus.PENDING,
        upvotes=0,
        downvotes=0,
        timestamp=now_ms(),
    )

    try:
        session.add(item)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_effect_failure("submit_feedback", e)
        item.id = temporary_id("fb")

    logger.info(f"Anonymous {feedback_type.value} received", extra={"feedback_category": item.category})
    return FeedbackOut.model_validate(item)


async def update_status(session: AsyncSession, caller: Caller, feedback_id: str, status) -> FeedbackOut:
    if not caller.is_admin:
        raise AuthorizationError("Insufficient permissions")
    new_status = require_choice(status, FeedbackStatus, "Invalid status", "status")

    item = await store.fetch_or_404(session, AnonymousFeedback, feedback_id, "Feedback")
    item.status = new_status
    await store.commit(session, "update_feedback_status")
    return FeedbackOut.model_validate(item)


async def vote(session: AsyncSession, caller: Caller, feedback_id: str, vote_type) -> FeedbackOut:
    submitted = require_choice(vote_type, VoteType, 'Vote type must be "up" or "down"', "voteType")

    item = await store.fetch_or_404(session, AnonymousFeedback, feedback_id, "Feedback")
    if not is_visible(item, caller):
        raise AuthorizationError("Access denied")

    try:
        existing = await session.scalar(
            select(FeedbackVote).where(
                FeedbackVote.feedback_id == feedback_id,
                FeedbackVote.user_id == caller.id,
            )
        )
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_error_with_context(e, "load_vote")
        raise DependencyUnavailableError(store.UNAVAILABLE)

    outcome = apply_vote(
        item.upvotes or 0,
        item.downvotes or 0,
        existing.vote_type if existing is not None else None,
        submitted,
    )

    if outcome.current is None:
        await session.delete(existing)
    elif existing is None:
        session.add(FeedbackVote(feedback_id=feedback_id, user_id=caller.id, vote_type=submitted))
    else:
        existing.vote_type = submitted

    item.upvotes = outcome.upvotes
    item.downvotes = outcome.downvotes
    await store.commit(session, "vote")
    return FeedbackOut.model_validate(item)


async def delete_feedback(session: AsyncSession, caller: Caller, feedback_id: str) -> None:
    """Removes the item and its votes together"""
    if not caller.is_admin:
        raise AuthorizationError("Insufficient permissions")

    item = await store.fetch_or_404(session, AnonymousFeedback, feedback_id, "Feedback")
    await store.delete_with(
        session,
        item,
        delete(FeedbackVote).where(FeedbackVote.feedback_id == feedback_id),
        context="delete_feedback",
    )
