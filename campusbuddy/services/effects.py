"""
Primary operations vs auxiliary effects.

A primary operation (the create/update/delete an endpoint exists for) is
committed on its own and its failures propagate. Auxiliary effects (points,
activity log, presence flag, first-contact profile) go through `run_effect`:
each commits independently, rolls back only itself when the store fails,
logs a warning and reports False. They never raise and never undo the
primary write.

Callers must snapshot whatever they return before running effects: a
rollback expires every instance loaded in the session.
"""
from typing import Awaitable, Callable

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.core.logging_config import logger
from campusbuddy.models.badge import ActivityType, UserActivity
from campusbuddy.models.user import User


async def run_effect(
    session: AsyncSession,
    label: str,
    effect: Callable[[], Awaitable[None]],
    **log_context,
) -> bool:
    """Run and commit one auxiliary write; failures are logged, not raised"""
    try:
        await effect()
        await session.commit()
        return True
    except SQLAlchemyError as e:
        try:
            await session.rollback()
        except SQLAlchemyError as rollback_error:
            logger.log_effect_failure(f"{label}:rollback", rollback_error)
        logger.log_effect_failure(label, e, **log_context)
        return False


async def award_points(session: AsyncSession, user_id: str, amount: int) -> bool:
    """Atomic increment of a profile's points"""
    async def _apply():
        await session.execute(
            update(User)
            .where(User.id == user_id)
            .values(points=User.points + amount)
            .execution_options(synchronize_session=False)
        )

    return await run_effect(session, "award_points", _apply, target_user=user_id, points=amount)


async def log_activity(
    session: AsyncSession,
    user_id: str,
    activity_type: ActivityType,
    description: str,
    points: int = 0,
) -> bool:
    """Append an activity-log entry"""
    async def _apply():
        session.add(UserActivity(
            user_id=user_id,
            type=activity_type,
            description=description,
            points=points,
        ))

    return await run_effect(session, "log_activity", _apply, target_user=user_id, activity=activity_type.value)


async def reward(
    session: AsyncSession,
    user_id: str,
    points: int,
    activity_type: ActivityType,
    description: str,
) -> None:
    """Points plus the matching activity entry, as two independent effects"""
    await award_points(session, user_id, points)
    await log_activity(session, user_id, activity_type, description, points)


async def set_online(session: AsyncSession, user_id: str, online: bool) -> bool:
    async def _apply():
        await session.execute(
            update(User)
            .where(User.id == user_id)
            .values(is_online=online)
            .execution_options(synchronize_session=False)
        )

    return await run_effect(session, "set_online", _apply, target_user=user_id, online=online)
