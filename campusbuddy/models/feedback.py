from sqlalchemy import Column, String, Text, Integer, BigInteger, UniqueConstraint, Enum as SQLEnum
import enum

from campusbuddy.core.database import Base
from campusbuddy.core.types import generate_id, now_ms
from campusbuddy.models.user import enum_values


class FeedbackType(str, enum.Enum):
    FEEDBACK = "feedback"
    COMPLAINT = "complaint"
    CONFESSION = "confession"


class FeedbackPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FeedbackStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"


class VoteType(str, enum.Enum):
    UP = "up"
    DOWN = "down"


class AnonymousFeedback(Base):
    """Feedback, complaint or confession. Carries no author."""
    __tablename__ = "anonymous_feedback"

    id = Column(String(64), primary_key=True, default=generate_id)
    type = Column(SQLEnum(FeedbackType, values_callable=enum_values), nullable=False, index=True)
    category = Column(String(100), nullable=False, default="general", index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    priority = Column(
        SQLEnum(FeedbackPriority, values_callable=enum_values),
        default=FeedbackPriority.MEDIUM,
        nullable=False,
    )
    status = Column(
        SQLEnum(FeedbackStatus, values_callable=enum_values),
        default=FeedbackStatus.PENDING,
        nullable=False,
        index=True,
    )
    upvotes = Column(Integer, default=0, nullable=False)
    downvotes = Column(Integer, default=0, nullable=False)
    timestamp = Column(BigInteger, default=now_ms, nullable=False, index=True)


class FeedbackVote(Base):
    """At most one vote per (feedback, user)"""
    __tablename__ = "feedback_votes"
    __table_args__ = (UniqueConstraint("feedback_id", "user_id", name="uq_feedback_vote"),)

    id = Column(String(64), primary_key=True, default=generate_id)
    feedback_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(128), nullable=False)
    vote_type = Column(SQLEnum(VoteType, values_callable=enum_values), nullable=False)
    timestamp = Column(BigInteger, default=now_ms, nullable=False)
