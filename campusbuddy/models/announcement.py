from sqlalchemy import Column, String, Text, Integer, BigInteger, JSON, UniqueConstraint, Enum as SQLEnum
import enum

from campusbuddy.core.database import Base
from campusbuddy.core.types import generate_id, now_ms
from campusbuddy.models.user import enum_values


class AnnouncementPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(String(64), primary_key=True, default=generate_id)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    author_id = Column(String(128), nullable=False, index=True)
    author_name = Column(String(255), nullable=False)
    society_name = Column(String(255), nullable=True, index=True)
    priority = Column(
        SQLEnum(AnnouncementPriority, values_callable=enum_values),
        default=AnnouncementPriority.MEDIUM,
        nullable=False,
    )
    tags = Column(JSON, default=list, nullable=False)
    attachments = Column(JSON, default=list, nullable=False)

    timestamp = Column(BigInteger, default=now_ms, nullable=False, index=True)
    expires_at = Column(BigInteger, nullable=False, index=True)

    views = Column(Integer, default=0, nullable=False)
    likes = Column(Integer, default=0, nullable=False)


class AnnouncementLike(Base):
    """At most one like per (announcement, user)"""
    __tablename__ = "announcement_likes"
    __table_args__ = (UniqueConstraint("announcement_id", "user_id", name="uq_announcement_like"),)

    id = Column(String(64), primary_key=True, default=generate_id)
    announcement_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(128), nullable=False)
    timestamp = Column(BigInteger, default=now_ms, nullable=False)
