from sqlalchemy import Column, String, Text, Boolean, BigInteger, Enum as SQLEnum
import enum

from campusbuddy.core.database import Base
from campusbuddy.core.types import generate_id, now_ms
from campusbuddy.models.user import enum_values


class MoodType(str, enum.Enum):
    STRESSED = "stressed"
    TIRED = "tired"
    MOTIVATED = "motivated"
    HAPPY = "happy"
    ANXIOUS = "anxious"
    FOCUSED = "focused"


class MoodEntry(Base):
    __tablename__ = "mood_entries"

    id = Column(String(64), primary_key=True, default=generate_id)
    user_id = Column(String(128), nullable=False, index=True)
    mood = Column(SQLEnum(MoodType, values_callable=enum_values), nullable=False)
    study_tip = Column(Text, nullable=False)
    helpful = Column(Boolean, nullable=True)  # unset until the user rates the tip
    timestamp = Column(BigInteger, default=now_ms, nullable=False, index=True)
