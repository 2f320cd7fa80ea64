"""Lost & found reports. `returned` is terminal and rewards both parties."""
from typing import Optional

from sqlalchemy import select, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.core.exceptions import AuthorizationError, ValidationError
from campusbuddy.core.logging_config import logger
from campusbuddy.core.types import now_ms, temporary_id
from campusbuddy.models.badge import ActivityType
from campusbuddy.models.lost_found import LostFoundCategory, LostFoundItem, LostFoundStatus
from campusbuddy.schemas.common import PaginatedResponse, build_page
from campusbuddy.schemas.lost_found import LostFoundCreate, LostFoundOut, LostFoundUpdate
from campusbuddy.services import effects, store
from campusbuddy.services.gamification import POINTS
from campusbuddy.services.users import Caller
from campusbuddy.services.validation import page_params, require_choice, require_fields, require_text

REPORTABLE = (LostFoundStatus.LOST, LostFoundStatus.FOUND)


async def list_items(
    session: AsyncSession,
    page=None,
    limit=None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> PaginatedResponse:
    page, limit = page_params(page, limit, default_limit=20)

    filters = []
    if status:
        filters.append(LostFoundItem.status == require_choice(status, LostFoundStatus, "Invalid status", "status"))
    if category:
        filters.append(LostFoundItem.category == require_choice(category, LostFoundCategory, "Invalid category", "category"))
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        filters.append(or_(
            LostFoundItem.title.ilike(pattern),
            LostFoundItem.description.ilike(pattern),
            LostFoundItem.location.ilike(pattern),
        ))

    try:
        total = await session.scalar(select(func.count()).select_from(LostFoundItem).where(*filters))
        result = await session.execute(
            select(LostFoundItem)
            .where(*filters)
            .order_by(LostFoundItem.timestamp.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = [LostFoundOut.model_validate(i) for i in result.scalars().all()]
    except SQLAlchemyError as e:
        logger.log_effect_failure("list_lost_found", e)
        return build_page([], 0, page, limit)

    return build_page(items, total or 0, page, limit)


async def get_item(session: AsyncSession, item_id: str) -> LostFoundOut:
    item = await store.fetch_or_404(session, LostFoundItem, item_id, "Item")
    return LostFoundOut.model_validate(item)


async def report_item(session: AsyncSession, caller: Caller, payload: LostFoundCreate) -> LostFoundOut:
    require_fields(
        "Title, description, category, status, location, and contact info are required",
        title=payload.title,
        description=payload.description,
        category=payload.category,
        status=payload.status,
        location=payload.location,
        contact_info=payload.contact_info,
    )
    category = require_choice(payload.category, LostFoundCategory, "Invalid category", "category")
    status = require_choice(payload.status, LostFoundStatus, 'Status must be either "lost" or "found"', "status")
    if status not in REPORTABLE:
        raise ValidationError('Status must be either "lost" or "found"', "status")

    item = LostFoundItem(
        title=payload.title.strip(),
        description=payload.description.strip(),
        category=category,
        status=status,
        reporter_id=caller.id,
        reporter_name=caller.name,
        location=payload.location.strip(),
        contact_info=payload.contact_info.strip(),
        image_url=(payload.image_url or "").strip() or None,
        timestamp=now_ms(),
    )

    try:
        session.add(item)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_effect_failure("report_item", e, target_user=caller.id)
        item.id = temporary_id("lf")
        return LostFoundOut.model_validate(item)

    reported = LostFoundOut.model_validate(item)
    await effects.reward(
        session, caller.id, POINTS["lost_found_report"], ActivityType.LOST_FOUND,
        f"Reported {status.value} item: {reported.title}",
    )
    return reported


def _require_reporter_or_admin(caller: Caller, item: LostFoundItem, action: str) -> None:
    if item.reporter_id != caller.id and not caller.is_admin:
        raise AuthorizationError(f"You can only {action} your own reports")


async def update_item(session: AsyncSession, caller: Caller, item_id: str, payload: LostFoundUpdate) -> LostFoundOut:
    item = await store.fetch_or_404(session, LostFoundItem, item_id, "Item")
    _require_reporter_or_admin(caller, item, "edit")

    if payload.title is not None:
        item.title = require_text(payload.title, "Title cannot be empty", "title")
    if payload.description is not None:
        item.description = require_text(payload.description, "Description cannot be empty", "description")
    if payload.category is not None:
        item.category = require_choice(payload.category, LostFoundCategory, "Invalid category", "category")
    if payload.location is not None:
        item.location = require_text(payload.location, "Location cannot be empty", "location")
    if payload.contact_info is not None:
        item.contact_info = require_text(payload.contact_info, "Contact info cannot be empty", "contactInfo")
    if payload.image_url is not None:
        item.image_url = payload.image_url.strip() or None

    await store.commit(session, "update_item")
    return LostFoundOut.model_validate(item)


async def mark_returned(session: AsyncSession, caller: Caller, item_id: str) -> LostFoundOut:
    """Terminal transition; reporter and (if different) resolver are rewarded"""
    item = await store.fetch_or_404(session, LostFoundItem, item_id, "Item")
    if item.status == LostFoundStatus.RETURNED:
        raise ValidationError("Item is already marked as returned", "status")

    item.status = LostFoundStatus.RETURNED
    item.resolved_at = now_ms()
    item.resolved_by = caller.id
    await store.commit(session, "mark_returned")

    returned = LostFoundOut.model_validate(item)
    await effects.award_points(session, returned.reporter_id, POINTS["lost_found_resolved"])
    if caller.id != returned.reporter_id:
        await effects.award_points(session, caller.id, POINTS["lost_found_resolved"])
    return returned


async def delete_item(session: AsyncSession, caller: Caller, item_id: str) -> None:
    item = await store.fetch_or_404(session, LostFoundItem, item_id, "Item")
    _require_reporter_or_admin(caller, item, "delete")
    await store.delete_with(session, item, context="delete_item")
