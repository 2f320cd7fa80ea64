"""Badge catalog, earned badges and the activity log."""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.core.exceptions import AuthorizationError
from campusbuddy.core.logging_config import logger
from campusbuddy.models.badge import Badge, BadgeCategory, UserActivity
from campusbuddy.models.user import User
from campusbuddy.schemas.badge import ActivityOut, AutomaticCheckResult, AwardRequest, BadgeCreate, BadgeOut
from campusbuddy.schemas.user import EarnedBadge
from campusbuddy.services import gamification, store
from campusbuddy.services.gamification import Notifier
from campusbuddy.services.users import Caller
from campusbuddy.services.validation import coerce_int, enum_list, require_choice, require_fields

_CATEGORY_ERROR = f"Category must be one of: {enum_list(BadgeCategory)}"


async def list_badges(session: AsyncSession) -> List[BadgeOut]:
    try:
        result = await session.execute(select(Badge).order_by(Badge.category, Badge.name))
    except SQLAlchemyError as e:
        logger.log_effect_failure("list_badges", e)
        return []
    return [BadgeOut.model_validate(b) for b in result.scalars().all()]


async def user_badges(session: AsyncSession, caller: Caller, user_id: str) -> List[EarnedBadge]:
    caller.require_self_or_admin(user_id, "You can only view your own badges")
    user = await store.fetch_or_404(session, User, user_id, "User")
    return [EarnedBadge.model_validate(b) for b in user.badges or []]


async def user_activities(session: AsyncSession, caller: Caller, user_id: str, limit=None) -> List[ActivityOut]:
    caller.require_self_or_admin(user_id, "You can only view your own activities")
    limit = min(coerce_int(limit, 20), 100)
    try:
        result = await session.execute(
            select(UserActivity)
            .where(UserActivity.user_id == user_id)
            .order_by(UserActivity.timestamp.desc())
            .limit(limit)
        )
    except SQLAlchemyError as e:
        logger.log_effect_failure("list_activities", e, target_user=user_id)
        return []
    return [ActivityOut.model_validate(a) for a in result.scalars().all()]


async def create_badge(session: AsyncSession, caller: Caller, payload: BadgeCreate) -> BadgeOut:
    if not caller.is_admin:
        raise AuthorizationError("Insufficient permissions")
    require_fields(
        "Name, description, icon, and category are required",
        name=payload.name,
        description=payload.description,
        icon=payload.icon,
        category=payload.category,
    )
    category = require_choice(payload.category, BadgeCategory, _CATEGORY_ERROR, "category")

    badge = Badge(
        name=payload.name.strip(),
        description=payload.description.strip(),
        icon=payload.icon.strip(),
        category=category,
    )
    session.add(badge)
    await store.commit(session, "create_badge")
    return BadgeOut.model_validate(badge)


async def award(
    session: AsyncSession,
    caller: Caller,
    payload: AwardRequest,
    notifier: Optional[Notifier] = None,
) -> EarnedBadge:
    if not caller.is_admin:
        raise AuthorizationError("Insufficient permissions")
    require_fields("User ID and badge ID are required", user_id=payload.user_id, badge_id=payload.badge_id)

    user = await store.fetch_or_404(session, User, payload.user_id, "User")
    badge = await store.fetch_or_404(session, Badge, payload.badge_id, "Badge")
    return await gamification.award_badge(session, user, badge, notifier)


async def check_automatic(session: AsyncSession, caller: Caller, notifier: Optional[Notifier] = None) -> AutomaticCheckResult:
    awarded, total = await gamification.check_automatic(session, caller.id, notifier)
    return AutomaticCheckResult(awarded=awarded, total_badges=total)
