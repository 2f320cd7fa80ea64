from typing import List, Optional

from campusbuddy.schemas.common import CamelModel


class Reaction(CamelModel):
    emoji: str
    user_ids: List[str]
    count: int


class MessageOut(CamelModel):
    id: str
    content: str
    author_id: str
    author_name: str
    author_batch: str
    timestamp: int
    edited: bool = False
    edited_at: Optional[int] = None
    reactions: List[Reaction] = []


class MessageCreate(CamelModel):
    content: Optional[str] = None


class MessageUpdate(CamelModel):
    content: Optional[str] = None


class ReactionRequest(CamelModel):
    emoji: Optional[str] = None


class SummaryRequest(CamelModel):
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    message_count: int = 50


class TimeRange(CamelModel):
    start: int
    end: int


class ChatSummaryOut(CamelModel):
    id: str
    summary: str
    message_count: int
    time_range: TimeRange
    generated_at: int
