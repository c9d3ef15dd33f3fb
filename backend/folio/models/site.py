"""
Site chrome models: navigation, chat settings, featured items, quick actions
"""
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, Uuid

from folio.core.database import Base
from folio.models.types import utcnow


class NavLink(Base):
    __tablename__ = "nav_links"

    id = Column(Uuid, primary_key=True, default=uuid4)
    label = Column(String(255), nullable=False)
    url = Column(String(2048), nullable=False)
    order_index = Column(Integer, nullable=False, default=0)
    enabled = Column(Boolean, nullable=False, default=True)
    is_external = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class ChatSettings(Base):
    """Singleton row configuring the chat widget"""
    __tablename__ = "chat_settings"

    id = Column(Uuid, primary_key=True, default=uuid4)
    webhook_url = Column(String(2048), nullable=True)
    initial_placeholder = Column(String(500), nullable=True)
    active_placeholder = Column(String(500), nullable=True)
    show_quick_actions = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class FeaturedIn(Base):
    __tablename__ = "featured_in"

    id = Column(Uuid, primary_key=True, default=uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(2048), nullable=True)
    link = Column(String(2048), nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class QuickAction(Base):
    """Preset chat prompt shown under the chat input"""
    __tablename__ = "quick_actions"

    id = Column(Uuid, primary_key=True, default=uuid4)
    label = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    icon = Column(String(100), nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
