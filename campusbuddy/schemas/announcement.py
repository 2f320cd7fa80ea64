from typing import List, Optional

from campusbuddy.models.announcement import AnnouncementPriority
from campusbuddy.schemas.common import CamelModel


class AnnouncementOut(CamelModel):
    id: str
    title: str
    content: str
    author_id: str
    author_name: str
    society_name: Optional[str] = None
    priority: AnnouncementPriority
    tags: List[str] = []
    attachments: List[str] = []
    timestamp: int
    expires_at: int
    views: int = 0
    likes: int = 0


class AnnouncementCreate(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    priority: Optional[str] = None
    society_name: Optional[str] = None
    tags: List[str] = []
    attachments: List[str] = []
    expires_at: Optional[int] = None


class AnnouncementUpdate(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    priority: Optional[str] = None
    society_name: Optional[str] = None
    tags: Optional[List[str]] = None
    attachments: Optional[List[str]] = None
    expires_at: Optional[int] = None


class LikeResult(CamelModel):
    liked: bool
    likes: int
