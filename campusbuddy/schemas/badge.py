from typing import List, Optional

from campusbuddy.models.badge import BadgeCategory, ActivityType
from campusbuddy.schemas.common import CamelModel
from campusbuddy.schemas.user import EarnedBadge


class BadgeOut(CamelModel):
    id: str
    name: str
    description: str
    icon: str
    category: BadgeCategory


class BadgeCreate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    category: Optional[str] = None


class AwardRequest(CamelModel):
    user_id: Optional[str] = None
    badge_id: Optional[str] = None


class ActivityOut(CamelModel):
    id: str
    user_id: str
    type: ActivityType
    description: str
    points: int
    timestamp: int


class AutomaticCheckResult(CamelModel):
    awarded: List[EarnedBadge]
    total_badges: int
