"""
Blog posts
"""
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from folio.core.errors import NotFoundError, ValidationError
from folio.core.logging_config import LoggingConfig
from folio.models.blog_post import (BlogCategory, BlogPost, BlogPostSource,
                                    BlogPostStatus)

logger = LoggingConfig.get_logger(__name__)

_EDITABLE = (
    "title", "slug", "content", "excerpt", "cover_image_url", "author_name",
    "status", "seo_title", "seo_description", "seo_keywords",
)


def slugify(text: str, max_length: int = 60) -> str:
    """Lowercase, non-alphanumerics collapsed to single hyphens"""
    slug = re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")
    return slug[:max_length].rstrip("-")


def unique_slug(title: str) -> str:
    """Slug with an epoch-millisecond suffix"""
    return f"{slugify(title) or 'post'}-{int(time.time() * 1000)}"


class BlogService:
    def __init__(self, db: Session):
        self.db = db

    def list_posts(self, published_only: bool = False, category_slug: Optional[str] = None) -> List[BlogPost]:
        """Newest first; an unknown category_slug matches nothing"""
        query = self.db.query(BlogPost)
        if category_slug:
            category = self.db.query(BlogCategory).filter(BlogCategory.slug == category_slug).first()
            if category is None:
                return []
            query = query.filter(BlogPost.categories.any(BlogCategory.id == category.id))
        if published_only:
            query = query.filter(BlogPost.status == BlogPostStatus.PUBLISHED.value)
        return query.order_by(BlogPost.created_at.desc()).all()

    def get_by_slug(self, slug: str, published_only: bool = False) -> BlogPost:
        query = self.db.query(BlogPost).filter(BlogPost.slug == slug)
        if published_only:
            query = query.filter(BlogPost.status == BlogPostStatus.PUBLISHED.value)
        post = query.first()
        if post is None:
            raise NotFoundError(f"Blog post '{slug}' not found")
        return post

    def get(self, post_id: UUID) -> BlogPost:
        post = self.db.query(BlogPost).filter(BlogPost.id == post_id).first()
        if post is None:
            raise NotFoundError(f"Blog post {post_id} not found")
        return post

    def _categories(self, category_ids: List[UUID]) -> List[BlogCategory]:
        ids = list(dict.fromkeys(category_ids))
        categories = (
            self.db.query(BlogCategory)
            .filter(BlogCategory.id.in_(ids))
            .order_by(BlogCategory.order_index)
            .all()
        ) if ids else []
        missing = set(ids) - {category.id for category in categories}
        if missing:
            raise ValidationError(f"Unknown blog categories: {', '.join(sorted(str(i) for i in missing))}")
        return categories

    def _apply_status(self, post: BlogPost) -> None:
        if post.status not in {s.value for s in BlogPostStatus}:
            raise ValidationError(f"Invalid blog status: {post.status}")
        if post.status == BlogPostStatus.PUBLISHED.value and post.published_at is None:
            post.published_at = datetime.now(timezone.utc)

    def create(self, data: Dict[str, Any], source: str = BlogPostSource.MANUAL.value) -> BlogPost:
        if not data.get("title"):
            raise ValidationError("Title is required")
        values = {key: data[key] for key in _EDITABLE if data.get(key) is not None}
        values["slug"] = slugify(values.get("slug") or values["title"]) or unique_slug(values["title"])
        post = BlogPost(source=source, **values)
        if data.get("category_ids") is not None:
            post.categories = self._categories(data["category_ids"])
        if post.status is None:
            post.status = BlogPostStatus.DRAFT.value
        self._apply_status(post)
        try:
            self.db.add(post)
            self.db.commit()
            self.db.refresh(post)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating blog post: {e}", exc_info=True)
            raise
        logger.info("Created blog post", extra={"post_id": str(post.id), "slug": post.slug})
        return post

    def update(self, post_id: UUID, data: Dict[str, Any]) -> BlogPost:
        post = self.get(post_id)
        for key in _EDITABLE:
            if key in data and data[key] is not None:
                setattr(post, key, slugify(data[key]) if key == "slug" else data[key])
        if data.get("category_ids") is not None:
            post.categories = self._categories(data["category_ids"])
        self._apply_status(post)
        try:
            self.db.commit()
            self.db.refresh(post)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating blog post {post_id}: {e}", exc_info=True)
            raise
        return post

    def delete(self, post_id: UUID) -> None:
        post = self.get(post_id)
        try:
            self.db.delete(post)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
