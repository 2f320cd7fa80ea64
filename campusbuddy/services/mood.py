"""Mood check-ins with a canned study tip per mood."""
from collections import Counter
from datetime import timedelta
from typing import Any, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.core.exceptions import AuthorizationError, DependencyUnavailableError, ValidationError
from campusbuddy.core.logging_config import logger
from campusbuddy.core.types import now_ms
from campusbuddy.models.badge import ActivityType
from campusbuddy.models.mood import MoodEntry, MoodType
from campusbuddy.schemas.common import PaginatedResponse, build_page
from campusbuddy.schemas.mood import MoodOut, MoodStats
from campusbuddy.services import effects, store
from campusbuddy.services.gamification import POINTS, study_tip
from campusbuddy.services.users import Caller
from campusbuddy.services.validation import coerce_int, enum_list, page_params, require_choice

NO_MOOD = "none"
DEFAULT_STATS_DAYS = 30

_MOOD_ERROR = f"Valid mood is required ({enum_list(MoodType)})"


async def list_entries(
    session: AsyncSession,
    caller: Caller,
    user_id: Optional[str] = None,
    page=None,
    limit=None,
) -> PaginatedResponse:
    """One user's entries, newest first; the caller's own unless they are admin"""
    target = user_id or caller.id
    caller.require_self_or_admin(target, "You can only view your own mood entries")
    page, limit = page_params(page, limit, default_limit=20)

    try:
        total = await session.scalar(
            select(func.count()).select_from(MoodEntry).where(MoodEntry.user_id == target)
        )
        result = await session.execute(
            select(MoodEntry)
            .where(MoodEntry.user_id == target)
            .order_by(MoodEntry.timestamp.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        entries = [MoodOut.model_validate(m) for m in result.scalars().all()]
    except SQLAlchemyError as e:
        logger.log_effect_failure("list_mood_entries", e, target_user=target)
        return build_page([], 0, page, limit)

    return build_page(entries, total or 0, page, limit)


async def record_mood(session: AsyncSession, caller: Caller, mood: Any) -> MoodOut:
    mood_type = require_choice(mood, MoodType, _MOOD_ERROR, "mood")

    entry = MoodEntry(
        user_id=caller.id,
        mood=mood_type,
        study_tip=study_tip(mood_type),
        timestamp=now_ms(),
    )
    session.add(entry)
    await store.commit(session, "record_mood")

    recorded = MoodOut.model_validate(entry)
    await effects.reward(
        session, caller.id, POINTS["mood_entry"], ActivityType.MOOD_ENTRY,
        f"Logged mood: {mood_type.value}",
    )
    return recorded


async def rate_tip(session: AsyncSession, caller: Caller, entry_id: str, helpful: Any) -> MoodOut:
    if not isinstance(helpful, bool):
        raise ValidationError("Helpful field must be a boolean", "helpful")

    entry = await store.fetch_or_404(session, MoodEntry, entry_id, "Mood entry")
    if entry.user_id != caller.id:
        raise AuthorizationError("You can only provide feedback on your own mood entries")

    entry.helpful = helpful
    await store.commit(session, "rate_tip")
    return MoodOut.model_validate(entry)


def most_common(distribution: Counter) -> str:
    """Highest count; a tie goes to the mood first seen most recently"""
    if not distribution:
        return NO_MOOD
    return max(reversed(list(distribution)), key=distribution.get)


async def mood_stats(
    session: AsyncSession,
    caller: Caller,
    user_id: Optional[str] = None,
    days=None,
) -> MoodStats:
    target = user_id or caller.id
    caller.require_self_or_admin(target, "You can only view your own mood statistics")
    days = coerce_int(days, DEFAULT_STATS_DAYS)
    since = now_ms() - int(timedelta(days=days).total_seconds() * 1000)

    try:
        result = await session.execute(
            select(MoodEntry.mood, MoodEntry.helpful)
            .where(MoodEntry.user_id == target, MoodEntry.timestamp >= since)
            .order_by(MoodEntry.timestamp)
        )
        rows = result.all()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_error_with_context(e, "mood_stats")
        raise DependencyUnavailableError(store.UNAVAILABLE)

    distribution = Counter(MoodType(mood).value for mood, _ in rows)
    rated = [helpful for _, helpful in rows if helpful is not None]
    helpfulness = round(sum(1 for h in rated if h) / len(rated) * 100, 2) if rated else 0.0

    return MoodStats(
        total_entries=len(rows),
        mood_distribution=dict(distribution),
        most_common_mood=most_common(distribution),
        tip_helpfulness_rate=helpfulness,
        period=f"{days} days",
    )


async def delete_entry(session: AsyncSession, caller: Caller, entry_id: str) -> None:
    entry = await store.fetch_or_404(session, MoodEntry, entry_id, "Mood entry")
    caller.require_self_or_admin(entry.user_id, "You can only delete your own mood entries")
    await store.delete_with(session, entry, context="delete_mood_entry")
