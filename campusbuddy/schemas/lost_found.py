from typing import Optional

from campusbuddy.models.lost_found import LostFoundCategory, LostFoundStatus
from campusbuddy.schemas.common import CamelModel


class LostFoundOut(CamelModel):
    id: str
    title: str
    description: str
    category: LostFoundCategory
    status: LostFoundStatus
    reporter_id: str
    reporter_name: str
    location: str
    contact_info: str
    image_url: Optional[str] = None
    timestamp: int
    resolved_at: Optional[int] = None
    resolved_by: Optional[str] = None


class LostFoundCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    location: Optional[str] = None
    contact_info: Optional[str] = None
    image_url: Optional[str] = None


class LostFoundUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    contact_info: Optional[str] = None
    image_url: Optional[str] = None
