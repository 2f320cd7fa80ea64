from typing import List, Optional

from campusbuddy.models.badge import BadgeCategory
from campusbuddy.models.user import UserRole
from campusbuddy.schemas.common import CamelModel


class EarnedBadge(CamelModel):
    """Catalog badge copied into a profile at award time"""
    id: str
    name: str
    description: str
    icon: str
    category: BadgeCategory
    earned_at: int


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    batch: str
    role: UserRole
    points: int = 0
    badges: List[EarnedBadge] = []
    is_online: bool = False
    profile_picture: Optional[str] = None
    joined_at: Optional[int] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    profile_picture: Optional[str] = None


class RegisterComplete(CamelModel):
    name: Optional[str] = None
    batch: Optional[str] = None
