from sqlalchemy import Column, String, Text, BigInteger, Enum as SQLEnum
import enum

from campusbuddy.core.database import Base
from campusbuddy.core.types import generate_id, now_ms
from campusbuddy.models.user import enum_values


class LostFoundCategory(str, enum.Enum):
    ELECTRONICS = "electronics"
    CLOTHING = "clothing"
    BOOKS = "books"
    ACCESSORIES = "accessories"
    DOCUMENTS = "documents"
    OTHER = "other"


class LostFoundStatus(str, enum.Enum):
    """lost/found -> returned; returned is terminal"""
    LOST = "lost"
    FOUND = "found"
    RETURNED = "returned"


class LostFoundItem(Base):
    __tablename__ = "lost_found_items"

    id = Column(String(64), primary_key=True, default=generate_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(LostFoundCategory, values_callable=enum_values), nullable=False, index=True)
    status = Column(SQLEnum(LostFoundStatus, values_callable=enum_values), nullable=False, index=True)

    reporter_id = Column(String(128), nullable=False, index=True)
    reporter_name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    contact_info = Column(String(255), nullable=False)
    image_url = Column(String(1024), nullable=True)

    timestamp = Column(BigInteger, default=now_ms, nullable=False, index=True)
    resolved_at = Column(BigInteger, nullable=True)
    resolved_by = Column(String(128), nullable=True)
