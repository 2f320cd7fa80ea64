from typing import Optional

from campusbuddy.models.feedback import FeedbackType, FeedbackPriority, FeedbackStatus
from campusbuddy.schemas.common import CamelModel


class FeedbackOut(CamelModel):
    id: str
    type: FeedbackType
    category: str
    title: str
    content: str
    priority: FeedbackPriority
    status: FeedbackStatus
    upvotes: int = 0
    downvotes: int = 0
    timestamp: int


class FeedbackCreate(CamelModel):
    type: Optional[str] = None
    category: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    priority: Optional[str] = None


class FeedbackStatusUpdate(CamelModel):
    status: Optional[str] = None


class VoteRequest(CamelModel):
    vote_type: Optional[str] = None
