"""
Gamification tables and the badge award path.

The tip, points and badge-rule tables are plain data. `award_badge` is the one
place a badge is granted, used by the admin endpoint and by automatic
evaluation alike.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Tuple

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.core.exceptions import DependencyUnavailableError, ValidationError
from campusbuddy.core.logging_config import logger
from campusbuddy.core.types import now_ms
from campusbuddy.models.badge import ActivityType, Badge, BadgeCategory, UserActivity
from campusbuddy.models.mood import MoodType
from campusbuddy.models.user import User
from campusbuddy.schemas.user import EarnedBadge
from campusbuddy.services import effects, store

# ============================================
# Mood tips
# ============================================

MOOD_TIPS: Mapping[MoodType, str] = {
    MoodType.STRESSED: (
        "Take deep breaths and break your study session into smaller, manageable chunks. "
        "Try the Pomodoro technique with 25-minute focused sessions."
    ),
    MoodType.TIRED: (
        "Consider taking a short 10-15 minute power nap, or try some light exercise to boost your energy. "
        "Stay hydrated and avoid heavy meals."
    ),
    MoodType.MOTIVATED: (
        "Great! Use this energy to tackle your most challenging subjects first. "
        "Set clear goals for this study session and reward yourself when you achieve them."
    ),
    MoodType.HAPPY: (
        "Channel this positive energy into collaborative learning. "
        "Consider studying with friends or teaching concepts to others to reinforce your understanding."
    ),
    MoodType.ANXIOUS: (
        "Start with easier topics to build confidence, then gradually move to more challenging material. "
        "Practice mindfulness or meditation before studying."
    ),
    MoodType.FOCUSED: (
        "Perfect! This is an ideal time for deep work. Eliminate distractions, put your phone away, "
        "and dive into complex problem-solving or detailed reading."
    ),
}

FALLBACK_TIP = "Remember to take regular breaks, stay hydrated, and maintain a positive mindset while studying."


def study_tip(mood: MoodType) -> str:
    return MOOD_TIPS.get(mood, FALLBACK_TIP)


# ============================================
# Points
# ============================================

POINTS: Mapping[str, int] = {
    "message": 1,
    "lost_found_report": 5,
    "lost_found_resolved": 10,
    "mood_entry": 2,
    "status_update": 3,
    "badge": 20,
}


# ============================================
# Automatic badge rules
# ============================================

@dataclass(frozen=True)
class ActivitySnapshot:
    """Activity counts by type plus points, captured before evaluation starts"""
    counts: Mapping[ActivityType, int] = field(default_factory=dict)
    points: int = 0

    def count(self, activity_type: ActivityType) -> int:
        return self.counts.get(activity_type, 0)


@dataclass(frozen=True)
class BadgeRule:
    id: str
    name: str
    description: str
    icon: str
    category: BadgeCategory
    predicate: Callable[[ActivitySnapshot], bool]
    reward: int = POINTS["badge"]


def _at_least(activity_type: ActivityType, n: int) -> Callable[[ActivitySnapshot], bool]:
    return lambda snapshot: snapshot.count(activity_type) >= n


def _points_at_least(n: int) -> Callable[[ActivitySnapshot], bool]:
    return lambda snapshot: snapshot.points >= n


BADGE_RULES: Tuple[BadgeRule, ...] = (
    BadgeRule("first-message", "First Message", "Sent your first chat message",
              "💬", BadgeCategory.SOCIAL, _at_least(ActivityType.MESSAGE, 1)),
    BadgeRule("helpful-finder", "Helpful Finder", "Reported 5 lost or found items",
              "🔍", BadgeCategory.HELPER, _at_least(ActivityType.LOST_FOUND, 5)),
    BadgeRule("mood-tracker", "Mood Tracker", "Logged your mood 10 times",
              "😊", BadgeCategory.ACADEMIC, _at_least(ActivityType.MOOD_ENTRY, 10)),
    BadgeRule("status-updater", "Status Updater", "Updated campus status 5 times",
              "📍", BadgeCategory.HELPER, _at_least(ActivityType.STATUS_UPDATE, 5)),
    BadgeRule("point-collector", "Point Collector", "Earned 100 points",
              "⭐", BadgeCategory.SPECIAL, _points_at_least(100)),
    BadgeRule("super-contributor", "Super Contributor", "Earned 500 points",
              "🏆", BadgeCategory.SPECIAL, _points_at_least(500)),
)


def due_rules(snapshot: ActivitySnapshot, held: set) -> List[BadgeRule]:
    """Rules newly satisfied by the snapshot, in table order"""
    return [rule for rule in BADGE_RULES if rule.id not in held and rule.predicate(snapshot)]


# ============================================
# Awarding
# ============================================

class Notifier(Protocol):
    async def notify_user(self, user_id: str, payload: Any) -> bool:
        ...


async def award_badge(
    session: AsyncSession,
    user: User,
    badge: Badge,
    notifier: Optional[Notifier] = None,
    bonus: int = POINTS["badge"],
) -> EarnedBadge:
    """
    Append an earned copy of `badge` to the profile (primary write), then add
    the bonus points and the activity entry as auxiliary effects and tell the
    recipient if they are connected.
    """
    if any(b.get("id") == badge.id for b in user.badges or []):
        raise ValidationError("User already has this badge", "badgeId")

    earned = badge.to_earned(now_ms())
    user.badges = list(user.badges or []) + [earned]
    await store.commit(session, "award_badge")

    user_id = user.id
    await effects.reward(
        session, user_id, bonus, ActivityType.BADGE_EARNED,
        f"Earned badge: {badge.name}",
    )
    awarded = EarnedBadge.model_validate(earned)
    logger.info(f"Badge '{awarded.id}' awarded to {user_id}")
    if notifier is not None:
        await notifier.notify_user(user_id, {
            "kind": "badge_earned",
            "badge": awarded.model_dump(mode="json", by_alias=True),
        })
    return awarded


async def take_snapshot(session: AsyncSession, user_id: str, points: int) -> ActivitySnapshot:
    try:
        result = await session.execute(
            select(UserActivity.type, func.count())
            .where(UserActivity.user_id == user_id)
            .group_by(UserActivity.type)
        )
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_error_with_context(e, "activity_snapshot")
        raise DependencyUnavailableError(store.UNAVAILABLE)

    counts: Dict[ActivityType, int] = {ActivityType(t): n for t, n in result.all()}
    return ActivitySnapshot(counts=counts, points=points)


async def _catalog_entry(session: AsyncSession, rule: BadgeRule) -> Badge:
    """Catalog badge for a rule, created on first use"""
    badge = await store.fetch(session, Badge, rule.id)
    if badge is None:
        badge = Badge(
            id=rule.id,
            name=rule.name,
            description=rule.description,
            icon=rule.icon,
            category=rule.category,
        )
        session.add(badge)
        await store.commit(session, "create_rule_badge")
    return badge


async def check_automatic(
    session: AsyncSession,
    user_id: str,
    notifier: Optional[Notifier] = None,
) -> Tuple[List[EarnedBadge], int]:
    """
    Evaluate BADGE_RULES against one snapshot and award whatever is due.
    Returns (newly awarded, total badges held).
    """
    user = await store.fetch(session, User, user_id)
    if user is None:
        return [], 0

    snapshot = await take_snapshot(session, user_id, user.points or 0)
    held = {b.get("id") for b in user.badges or []}

    awarded: List[EarnedBadge] = []
    for rule in due_rules(snapshot, held):
        badge = await _catalog_entry(session, rule)
        user = await store.fetch_or_404(session, User, user_id, "User")
        awarded.append(await award_badge(session, user, badge, notifier, rule.reward))

    return awarded, len(held) + len(awarded)
