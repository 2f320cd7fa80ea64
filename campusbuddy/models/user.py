from sqlalchemy import Column, String, Boolean, Integer, BigInteger, JSON, Enum as SQLEnum
import enum

from campusbuddy.core.database import Base
from campusbuddy.core.types import now_ms


def enum_values(enum_cls):
    """Store enum values ("society_head") rather than member names"""
    return [member.value for member in enum_cls]


class UserRole(str, enum.Enum):
    """User roles"""
    STUDENT = "student"
    ADMIN = "admin"
    SOCIETY_HEAD = "society_head"


class User(Base):
    """Campus profile, keyed by the identity provider's uid"""
    __tablename__ = "users"

    id = Column(String(128), primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=False, default="")
    batch = Column(String(20), nullable=False, default="", index=True)
    role = Column(SQLEnum(UserRole, values_callable=enum_values), default=UserRole.STUDENT, nullable=False)
    profile_picture = Column(String(1024), nullable=True)

    # Gamification
    points = Column(Integer, default=0, nullable=False)
    badges = Column(JSON, default=list, nullable=False)  # earned copies, insertion order

    # Presence flag, advisory only
    is_online = Column(Boolean, default=False, nullable=False)

    joined_at = Column(BigInteger, default=now_ms, nullable=False)

    def __repr__(self):
        return f"<User {self.id}>"
