from typing import Any, Dict, Optional

from campusbuddy.models.mood import MoodType
from campusbuddy.schemas.common import CamelModel


class MoodOut(CamelModel):
    id: str
    user_id: str
    mood: MoodType
    study_tip: str
    helpful: Optional[bool] = None
    timestamp: int


class MoodCreate(CamelModel):
    mood: Optional[str] = None


class MoodFeedback(CamelModel):
    # Left untyped so a non-boolean gets the service's own 400 message
    helpful: Any = None


class MoodStats(CamelModel):
    total_entries: int
    mood_distribution: Dict[str, int]
    most_common_mood: str
    tip_helpfulness_rate: float
    period: str
