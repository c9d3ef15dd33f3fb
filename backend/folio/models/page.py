"""
Page and page block models
"""
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, Uuid
from sqlalchemy.ext.mutable import MutableDict

from folio.core.database import Base
from folio.models.types import JSONType, utcnow


class Page(Base):
    """Site page addressed by slug"""
    __tablename__ = "pages"

    id = Column(Uuid, primary_key=True, default=uuid4)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    enabled = Column(Boolean, nullable=False, default=True)
    show_in_nav = Column(Boolean, nullable=False, default=False)
    is_main_landing = Column(Boolean, nullable=False, default=False)  # served at the site root
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class PageBlock(Base):
    """
    One section of a page.

    block_type selects the renderer; block_config is free-form per type.
    """
    __tablename__ = "page_blocks"

    id = Column(Uuid, primary_key=True, default=uuid4)
    page_slug = Column(String(255), nullable=False, index=True)
    block_type = Column(String(100), nullable=False)
    block_config = Column(MutableDict.as_mutable(JSONType), nullable=False, default=dict)
    order_index = Column(Integer, nullable=False, default=0)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
