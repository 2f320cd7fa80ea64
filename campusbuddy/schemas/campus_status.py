from typing import List, Optional

from campusbuddy.models.campus_status import FacilityStatus
from campusbuddy.schemas.common import CamelModel


class CampusStatusOut(CamelModel):
    id: str
    facility: str
    status: FacilityStatus
    description: str
    keywords: List[str] = []
    last_updated: int
    updated_by: str


class CampusStatusCreate(CamelModel):
    facility: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None
    keywords: List[str] = []


class CampusStatusUpdate(CamelModel):
    status: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[List[str]] = None


class KeywordCount(CamelModel):
    keyword: str
    count: int
