from sqlalchemy import Column, String, Text, Integer, BigInteger, Enum as SQLEnum
import enum

from campusbuddy.core.database import Base
from campusbuddy.core.types import generate_id, now_ms
from campusbuddy.models.user import enum_values


class BadgeCategory(str, enum.Enum):
    HELPER = "helper"
    SOCIAL = "social"
    ACADEMIC = "academic"
    SPECIAL = "special"


class ActivityType(str, enum.Enum):
    MESSAGE = "message"
    ANNOUNCEMENT = "announcement"
    LOST_FOUND = "lost_found"
    FEEDBACK = "feedback"
    MOOD_ENTRY = "mood_entry"
    STATUS_UPDATE = "status_update"
    BADGE_EARNED = "badge_earned"


class Badge(Base):
    """Catalog template; awarding copies it into User.badges"""
    __tablename__ = "badges"

    id = Column(String(64), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    icon = Column(String(32), nullable=False)
    category = Column(SQLEnum(BadgeCategory, values_callable=enum_values), nullable=False, index=True)

    def to_earned(self, earned_at: int) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "category": self.category.value if isinstance(self.category, BadgeCategory) else self.category,
            "earnedAt": earned_at,
        }


class UserActivity(Base):
    """Activity log entry; feeds automatic badge rules"""
    __tablename__ = "user_activities"

    id = Column(String(64), primary_key=True, default=generate_id)
    user_id = Column(String(128), nullable=False, index=True)
    type = Column(SQLEnum(ActivityType, values_callable=enum_values), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    points = Column(Integer, default=0, nullable=False)
    timestamp = Column(BigInteger, default=now_ms, nullable=False, index=True)
