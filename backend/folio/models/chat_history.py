"""
Persisted chat widget transcript
"""
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Text, Uuid

from folio.core.database import Base
from folio.models.types import utcnow


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatHistoryMessage(Base):
    """One message of a visitor chat session, grouped by the widget's session id"""
    __tablename__ = "chat_messages"

    id = Column(Uuid, primary_key=True, default=uuid4)
    session_id = Column(String(255), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<ChatHistoryMessage(session_id={self.session_id}, role={self.role})>"
