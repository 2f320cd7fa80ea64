"""Announcements: expiry-filtered listing, view counting, likes."""
from datetime import timedelta
from typing import Optional

from sqlalchemy import select, func, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.core.exceptions import AuthorizationError, DependencyUnavailableError
from campusbuddy.core.logging_config import logger
from campusbuddy.core.types import now_ms, temporary_id
from campusbuddy.models.announcement import Announcement, AnnouncementLike, AnnouncementPriority
from campusbuddy.models.user import UserRole
from campusbuddy.schemas.announcement import AnnouncementCreate, AnnouncementOut, AnnouncementUpdate, LikeResult
from campusbuddy.schemas.common import PaginatedResponse, build_page
from campusbuddy.services import store
from campusbuddy.services.chat import Broadcaster
from campusbuddy.services.users import Caller
from campusbuddy.services.validation import (
    enum_list,
    optional_choice,
    page_params,
    require_choice,
    require_fields,
    require_text,
)
from campusbuddy.services.voting import apply_like

ANNOUNCEMENT_NEW = "announcement:new"
DEFAULT_LIFETIME = timedelta(days=30)
PUBLISHER_ROLES = (UserRole.ADMIN, UserRole.SOCIETY_HEAD)

_PRIORITY_ERROR = f"Priority must be one of: {enum_list(AnnouncementPriority)}"


async def list_announcements(
    session: AsyncSession,
    page=None,
    limit=None,
    priority: Optional[str] = None,
    society: Optional[str] = None,
) -> PaginatedResponse:
    """Unexpired announcements, newest first"""
    page, limit = page_params(page, limit, default_limit=20)

    filters = [Announcement.expires_at > now_ms()]
    if priority:
        filters.append(Announcement.priority == require_choice(priority, AnnouncementPriority, _PRIORITY_ERROR, "priority"))
    if society:
        filters.append(Announcement.society_name == society)

    try:
        total = await session.scalar(select(func.count()).select_from(Announcement).where(*filters))
        result = await session.execute(
            select(Announcement)
            .where(*filters)
            .order_by(Announcement.timestamp.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = [AnnouncementOut.model_validate(a) for a in result.scalars().all()]
    except SQLAlchemyError as e:
        logger.log_effect_failure("list_announcements", e)
        return build_page([], 0, page, limit)

    return build_page(items, total or 0, page, limit)


async def get_announcement(session: AsyncSession, announcement_id: str) -> AnnouncementOut:
    """Every read counts as a view; the returned value includes this one"""
    announcement = await store.fetch_or_404(session, Announcement, announcement_id, "Announcement")

    try:
        await session.execute(
            update(Announcement)
            .where(Announcement.id == announcement_id)
            .values(views=Announcement.views + 1)
            .execution_options(synchronize_session=False)
        )
        await session.commit()
        await session.refresh(announcement, ["views"])
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_error_with_context(e, "count_view")
        raise DependencyUnavailableError(store.UNAVAILABLE)

    return AnnouncementOut.model_validate(announcement)


async def create_announcement(
    session: AsyncSession,
    caller: Caller,
    payload: AnnouncementCreate,
    broadcaster: Optional[Broadcaster] = None,
) -> AnnouncementOut:
    if not caller.has_role(*PUBLISHER_ROLES):
        raise AuthorizationError("Insufficient permissions")

    require_fields("Title and content are required", title=payload.title, content=payload.content)
    priority = optional_choice(payload.priority, AnnouncementPriority, AnnouncementPriority.MEDIUM,
                               _PRIORITY_ERROR, "priority")

    now = now_ms()
    announcement = Announcement(
        title=payload.title.strip(),
        content=payload.content.strip(),
        author_id=caller.id,
        author_name=caller.name,
        society_name=(payload.society_name or "").strip() or None,
        priority=priority,
        tags=[t.strip() for t in payload.tags if t and t.strip()],
        attachments=list(payload.attachments),
        timestamp=now,
        expires_at=payload.expires_at or now + int(DEFAULT_LIFETIME.total_seconds() * 1000),
        views=0,
        likes=0,
    )

    try:
        session.add(announcement)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_effect_failure("create_announcement", e, target_user=caller.id)
        announcement.id = temporary_id("ann")
        return AnnouncementOut.model_validate(announcement)

    created = AnnouncementOut.model_validate(announcement)
    if broadcaster is not None:
        await broadcaster.broadcast(ANNOUNCEMENT_NEW, created.model_dump(mode="json", by_alias=True))
    return created


def _require_author_or_admin(caller: Caller, announcement: Announcement, action: str) -> None:
    if announcement.author_id != caller.id and not caller.is_admin:
        raise AuthorizationError(f"You can only {action} your own announcements")


async def update_announcement(
    session: AsyncSession,
    caller: Caller,
    announcement_id: str,
    payload: AnnouncementUpdate,
) -> AnnouncementOut:
    announcement = await store.fetch_or_404(session, Announcement, announcement_id, "Announcement")
    _require_author_or_admin(caller, announcement, "edit")

    if payload.title is not None:
        announcement.title = require_text(payload.title, "Title cannot be empty", "title")
    if payload.content is not None:
        announcement.content = require_text(payload.content, "Content cannot be empty", "content")
    if payload.priority is not None:
        announcement.priority = require_choice(payload.priority, AnnouncementPriority, _PRIORITY_ERROR, "priority")
    if payload.society_name is not None:
        announcement.society_name = payload.society_name.strip() or None
    if payload.tags is not None:
        announcement.tags = [t.strip() for t in payload.tags if t and t.strip()]
    if payload.attachments is not None:
        announcement.attachments = list(payload.attachments)
    if payload.expires_at is not None:
        announcement.expires_at = payload.expires_at

    await store.commit(session, "update_announcement")
    return AnnouncementOut.model_validate(announcement)


async def delete_announcement(session: AsyncSession, caller: Caller, announcement_id: str) -> None:
    """Removes the announcement and its likes together"""
    announcement = await store.fetch_or_404(session, Announcement, announcement_id, "Announcement")
    _require_author_or_admin(caller, announcement, "delete")

    await store.delete_with(
        session,
        announcement,
        delete(AnnouncementLike).where(AnnouncementLike.announcement_id == announcement_id),
        context="delete_announcement",
    )


async def toggle_like(session: AsyncSession, caller: Caller, announcement_id: str) -> LikeResult:
    announcement = await store.fetch_or_404(session, Announcement, announcement_id, "Announcement")

    try:
        existing = await session.scalar(
            select(AnnouncementLike).where(
                AnnouncementLike.announcement_id == announcement_id,
                AnnouncementLike.user_id == caller.id,
            )
        )
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_error_with_context(e, "toggle_like")
        raise DependencyUnavailableError(store.UNAVAILABLE)

    liked_before = existing is not None
    if liked_before:
        await session.delete(existing)
    else:
        session.add(AnnouncementLike(announcement_id=announcement_id, user_id=caller.id))
    announcement.likes = apply_like(announcement.likes or 0, liked_before)

    await store.commit(session, "toggle_like")
    return LikeResult(liked=not liked_before, likes=announcement.likes)


async def rebroadcast(session: AsyncSession, caller: Caller, announcement_id: str, broadcaster: Broadcaster) -> AnnouncementOut:
    """Push an existing announcement to every connected client again"""
    if not caller.has_role(*PUBLISHER_ROLES):
        raise AuthorizationError("Insufficient permissions")
    announcement = await store.fetch_or_404(session, Announcement, announcement_id, "Announcement")
    published = AnnouncementOut.model_validate(announcement)
    await broadcaster.broadcast(ANNOUNCEMENT_NEW, published.model_dump(mode="json", by_alias=True))
    return published
