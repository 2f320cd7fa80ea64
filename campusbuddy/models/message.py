from sqlalchemy import Column, String, Text, Boolean, Integer, BigInteger, JSON

from campusbuddy.core.database import Base
from campusbuddy.core.types import generate_id, now_ms


class Message(Base):
    """Chat message in the single campus-wide room"""
    __tablename__ = "messages"

    id = Column(String(64), primary_key=True, default=generate_id)
    content = Column(Text, nullable=False)

    # Author snapshot at send time
    author_id = Column(String(128), nullable=False, index=True)
    author_name = Column(String(255), nullable=False)
    author_batch = Column(String(20), nullable=False, default="")

    timestamp = Column(BigInteger, default=now_ms, nullable=False, index=True)
    edited = Column(Boolean, default=False, nullable=False)
    edited_at = Column(BigInteger, nullable=True)

    # [{"emoji": "👍", "userIds": [...], "count": n}]
    reactions = Column(JSON, default=list, nullable=False)

    def __repr__(self):
        return f"<Message {self.id} by {self.author_id}>"


class ChatSummary(Base):
    """Stored templated report over a window of messages"""
    __tablename__ = "chat_summaries"

    id = Column(String(64), primary_key=True, default=generate_id)
    summary = Column(Text, nullable=False)
    message_count = Column(Integer, nullable=False)
    time_range = Column(JSON, nullable=False)  # {"start": ms, "end": ms}
    generated_at = Column(BigInteger, default=now_ms, nullable=False, index=True)
