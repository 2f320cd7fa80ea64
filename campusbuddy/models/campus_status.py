from sqlalchemy import Column, String, Text, BigInteger, JSON, Enum as SQLEnum
import enum

from campusbuddy.core.database import Base
from campusbuddy.core.types import generate_id, now_ms
from campusbuddy.models.user import enum_values


class FacilityStatus(str, enum.Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    CLOSED = "closed"
    MAINTENANCE = "maintenance"


class CampusStatus(Base):
    """Facility board entry; one row per facility name"""
    __tablename__ = "campus_status"

    id = Column(String(64), primary_key=True, default=generate_id)
    facility = Column(String(255), nullable=False, unique=True)
    status = Column(SQLEnum(FacilityStatus, values_callable=enum_values), nullable=False)
    description = Column(Text, nullable=False)
    keywords = Column(JSON, default=list, nullable=False)
    last_updated = Column(BigInteger, default=now_ms, nullable=False, index=True)
    updated_by = Column(String(128), nullable=False)
