"""
Campus status board.

One entry per facility: posting a status for a facility that already has one
replaces it in place. Keyword search runs over the (small) board in memory.
"""
from collections import Counter
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.core.exceptions import AuthorizationError, DependencyUnavailableError
from campusbuddy.core.logging_config import logger
from campusbuddy.core.types import now_ms
from campusbuddy.models.badge import ActivityType
from campusbuddy.models.campus_status import CampusStatus, FacilityStatus
from campusbuddy.schemas.campus_status import CampusStatusCreate, CampusStatusOut, CampusStatusUpdate, KeywordCount
from campusbuddy.services import effects, store
from campusbuddy.services.chat import Broadcaster
from campusbuddy.services.gamification import POINTS
from campusbuddy.services.users import Caller
from campusbuddy.services.validation import coerce_int, enum_list, require_choice, require_fields, require_text

STATUS_UPDATE = "status:update"

_STATUS_ERROR = f"Status must be one of: {enum_list(FacilityStatus)}"


def clean_keywords(keywords: Optional[List[Any]]) -> List[str]:
    return [k.strip() for k in keywords or [] if isinstance(k, str) and k.strip()]


def matches(entry: CampusStatusOut, term: str) -> bool:
    """Case-insensitive containment in keywords, facility or description"""
    needle = term.lower()
    if needle in entry.facility.lower() or needle in entry.description.lower():
        return True
    return any(needle in keyword.lower() for keyword in entry.keywords)


async def _board(session: AsyncSession, facility: Optional[str] = None) -> List[CampusStatusOut]:
    query = select(CampusStatus).order_by(CampusStatus.last_updated.desc())
    if facility:
        query = query.where(CampusStatus.facility == facility)
    result = await session.execute(query)
    return [CampusStatusOut.model_validate(s) for s in result.scalars().all()]


async def list_statuses(
    session: AsyncSession,
    facility: Optional[str] = None,
    keyword: Optional[str] = None,
) -> List[CampusStatusOut]:
    try:
        entries = await _board(session, facility)
    except SQLAlchemyError as e:
        logger.log_effect_failure("list_statuses", e)
        return []

    if keyword and keyword.strip():
        entries = [entry for entry in entries if matches(entry, keyword.strip())]
    return entries


async def search_statuses(session: AsyncSession, query: str) -> List[CampusStatusOut]:
    return await list_statuses(session, keyword=query)


async def popular_keywords(session: AsyncSession, limit=None) -> List[KeywordCount]:
    """Keyword frequencies across the board, most used first"""
    limit = min(coerce_int(limit, 10), 100)
    try:
        entries = await _board(session)
    except SQLAlchemyError as e:
        logger.log_effect_failure("popular_keywords", e)
        return []

    counts = Counter(keyword.lower() for entry in entries for keyword in entry.keywords)
    return [KeywordCount(keyword=k, count=n) for k, n in counts.most_common(limit)]


async def get_status(session: AsyncSession, status_id: str) -> CampusStatusOut:
    entry = await store.fetch_or_404(session, CampusStatus, status_id, "Campus status")
    return CampusStatusOut.model_validate(entry)


async def _announce(session: AsyncSession, caller: Caller, entry: CampusStatusOut,
                    broadcaster: Optional[Broadcaster]) -> None:
    await effects.reward(
        session, caller.id, POINTS["status_update"], ActivityType.STATUS_UPDATE,
        f"Updated status of {entry.facility}",
    )
    if broadcaster is not None:
        await broadcaster.broadcast(STATUS_UPDATE, entry.model_dump(mode="json", by_alias=True))


async def post_status(
    session: AsyncSession,
    caller: Caller,
    payload: CampusStatusCreate,
    broadcaster: Optional[Broadcaster] = None,
) -> CampusStatusOut:
    """Create the facility's entry or replace the existing one"""
    require_fields(
        "Facility, status, and description are required",
        facility=payload.facility,
        status=payload.status,
        description=payload.description,
    )
    status = require_choice(payload.status, FacilityStatus, _STATUS_ERROR, "status")
    facility = payload.facility.strip()

    try:
        entry = await session.scalar(select(CampusStatus).where(CampusStatus.facility == facility))
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_error_with_context(e, "load_status")
        raise DependencyUnavailableError(store.UNAVAILABLE)

    if entry is None:
        entry = CampusStatus(facility=facility)
        session.add(entry)
    entry.status = status
    entry.description = payload.description.strip()
    entry.keywords = clean_keywords(payload.keywords)
    entry.last_updated = now_ms()
    entry.updated_by = caller.id
    await store.commit(session, "post_status")

    posted = CampusStatusOut.model_validate(entry)
    await _announce(session, caller, posted, broadcaster)
    return posted


async def update_status(
    session: AsyncSession,
    caller: Caller,
    status_id: str,
    payload: CampusStatusUpdate,
    broadcaster: Optional[Broadcaster] = None,
) -> CampusStatusOut:
    entry = await store.fetch_or_404(session, CampusStatus, status_id, "Campus status")

    if payload.status is not None:
        entry.status = require_choice(payload.status, FacilityStatus, _STATUS_ERROR, "status")
    if payload.description is not None:
        entry.description = require_text(payload.description, "Description cannot be empty", "description")
    if payload.keywords is not None:
        entry.keywords = clean_keywords(payload.keywords)
    entry.last_updated = now_ms()
    entry.updated_by = caller.id
    await store.commit(session, "update_status")

    updated = CampusStatusOut.model_validate(entry)
    await _announce(session, caller, updated, broadcaster)
    return updated


async def delete_status(session: AsyncSession, caller: Caller, status_id: str) -> None:
    if not caller.is_admin:
        raise AuthorizationError("Only admins can delete campus status")
    entry = await store.fetch_or_404(session, CampusStatus, status_id, "Campus status")
    await store.delete_with(session, entry, context="delete_status")


async def rebroadcast(session: AsyncSession, status_id: str, broadcaster: Broadcaster) -> CampusStatusOut:
    entry = await get_status(session, status_id)
    await broadcaster.broadcast(STATUS_UPDATE, entry.model_dump(mode="json", by_alias=True))
    return entry
