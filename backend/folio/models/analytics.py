"""
Visitor analytics models
"""
from uuid import uuid4

from sqlalchemy import Column, DateTime, Integer, String, Text, Uuid

from folio.core.database import Base
from folio.models.types import utcnow


class PageView(Base):
    __tablename__ = "page_views"

    id = Column(Uuid, primary_key=True, default=uuid4)
    page_slug = Column(String(500), nullable=False, index=True)
    visitor_id = Column(String(255), nullable=True, index=True)
    user_agent = Column(Text, nullable=True)
    referrer = Column(String(2048), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)


class ChatAnalytics(Base):
    """One chat session of a visitor"""
    __tablename__ = "chat_analytics"

    id = Column(Uuid, primary_key=True, default=uuid4)
    visitor_id = Column(String(255), nullable=True, index=True)
    message_count = Column(Integer, nullable=False, default=0)
    session_start = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    session_end = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
