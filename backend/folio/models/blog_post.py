"""
Blog post and blog category models
"""
from enum import Enum
from uuid import uuid4

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Integer, String,
                        Table, Text, Uuid)
from sqlalchemy.orm import relationship

from folio.core.database import Base
from folio.models.types import JSONType, utcnow


class BlogPostStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class BlogPostSource(str, Enum):
    MANUAL = "manual"
    AGENT = "agent"


blog_post_categories = Table(
    "blog_post_categories",
    Base.metadata,
    Column("post_id", Uuid, ForeignKey("blog_posts.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Uuid, ForeignKey("blog_categories.id", ondelete="CASCADE"), primary_key=True),
)


class BlogCategory(Base):
    __tablename__ = "blog_categories"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<BlogCategory(slug={self.slug})>"


class BlogPost(Base):
    """Blog post; content is stored and returned as-is (markdown)"""
    __tablename__ = "blog_posts"

    id = Column(Uuid, primary_key=True, default=uuid4)
    title = Column(String(500), nullable=False)
    slug = Column(String(500), nullable=False, unique=True, index=True)
    content = Column(Text, nullable=False, default="")
    excerpt = Column(Text, nullable=True)
    cover_image_url = Column(String(2048), nullable=True)
    author_name = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=BlogPostStatus.DRAFT.value)
    source = Column(String(20), nullable=False, default=BlogPostSource.MANUAL.value)
    seo_title = Column(String(500), nullable=True)
    seo_description = Column(Text, nullable=True)
    seo_keywords = Column(JSONType, nullable=True)  # list of strings
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    categories = relationship(
        "BlogCategory",
        secondary=blog_post_categories,
        order_by="BlogCategory.order_index",
        lazy="selectin",
    )
