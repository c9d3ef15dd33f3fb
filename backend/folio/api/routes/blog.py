"""
API routes for blog posts
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from folio.core.auth import require_admin
from folio.core.database import get_db
from folio.core.logging_config import LoggingConfig
from folio.models.blog_post import BlogPost, BlogPostStatus
from folio.services.blog_service import BlogService
from folio.services.webhook_dispatcher import (WebhookDispatcher, WebhookEvent,
                                               get_webhook_transport)

router = APIRouter(prefix="/api/blog", tags=["blog"])
logger = LoggingConfig.get_logger(__name__)


class BlogCategoryRef(BaseModel):
    id: UUID
    name: str
    slug: str

    class Config:
        from_attributes = True


class BlogPostResponse(BaseModel):
    id: UUID
    title: str
    slug: str
    content: str
    excerpt: Optional[str] = None
    cover_image_url: Optional[str] = None
    author_name: Optional[str] = None
    status: str
    source: str
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    seo_keywords: Optional[List[str]] = None
    categories: List[BlogCategoryRef] = Field(default_factory=list)
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BlogPostCreate(BaseModel):
    title: str = Field(..., min_length=1)
    slug: Optional[str] = None
    content: str = ""
    excerpt: Optional[str] = None
    cover_image_url: Optional[str] = None
    author_name: Optional[str] = None
    status: str = "draft"
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    seo_keywords: Optional[List[str]] = None
    category_ids: Optional[List[UUID]] = None


class BlogPostUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    cover_image_url: Optional[str] = None
    author_name: Optional[str] = None
    status: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    seo_keywords: Optional[List[str]] = None
    category_ids: Optional[List[UUID]] = Field(default=None, description="Replaces the post's categories")


async def _announce(db: Session, post: BlogPost, transport) -> None:
    await WebhookDispatcher(db, transport=transport).dispatch(
        WebhookEvent.BLOG_POST_PUBLISHED,
        {"title": post.title, "slug": post.slug, "excerpt": post.excerpt},
    )


@router.get("", response_model=List[BlogPostResponse])
async def list_posts(include_drafts: bool = False, category: Optional[str] = None, db: Session = Depends(get_db)):
    """Published posts, newest first (drafts too with include_drafts), optionally in one category"""
    return BlogService(db).list_posts(published_only=not include_drafts, category_slug=category)


@router.get("/{slug}", response_model=BlogPostResponse)
async def get_post(slug: str, db: Session = Depends(get_db)):
    return BlogService(db).get_by_slug(slug, published_only=True)


@router.post("", response_model=BlogPostResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
async def create_post(
    request: BlogPostCreate,
    db: Session = Depends(get_db),
    transport=Depends(get_webhook_transport),
):
    post = BlogService(db).create(request.model_dump())
    if post.status == BlogPostStatus.PUBLISHED.value:
        await _announce(db, post, transport)
    return post


@router.patch("/{post_id}", response_model=BlogPostResponse, dependencies=[Depends(require_admin)])
async def update_post(
    post_id: UUID,
    request: BlogPostUpdate,
    db: Session = Depends(get_db),
    transport=Depends(get_webhook_transport),
):
    """Update a post; moving it to published fires blog.post_published"""
    service = BlogService(db)
    was_published = service.get(post_id).status == BlogPostStatus.PUBLISHED.value
    post = service.update(post_id, request.model_dump(exclude_unset=True))
    if post.status == BlogPostStatus.PUBLISHED.value and not was_published:
        await _announce(db, post, transport)
    return post


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
async def delete_post(post_id: UUID, db: Session = Depends(get_db)):
    BlogService(db).delete(post_id)
