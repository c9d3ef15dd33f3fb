"""
Open Graph share page for blog posts
"""
from typing import Optional

from sqlalchemy.orm import Session

from folio.core.config import Settings, get_settings
from folio.core.templates import render_template
from folio.models.blog_post import BlogPost, BlogPostStatus

CACHE_CONTROL = "public, max-age=3600, s-maxage=3600"


def blog_index_url(settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    return f"{settings.site_url.rstrip('/')}/blog"


def render_og_page(db: Session, slug: str, settings: Optional[Settings] = None) -> str:
    """
    HTML with OG/Twitter meta for a published post, then a redirect to the SPA.

    Unknown or unpublished slugs fall back to the site defaults.
    """
    settings = settings or get_settings()
    site_url = settings.site_url.rstrip("/")
    post = (
        db.query(BlogPost)
        .filter(BlogPost.slug == slug, BlogPost.status == BlogPostStatus.PUBLISHED.value)
        .first()
    )

    title = (post and (post.seo_title or post.title)) or settings.default_og_title
    description = (post and (post.seo_description or post.excerpt)) or settings.default_og_description
    image = (post and post.cover_image_url) or settings.default_og_image
    image_url = image if image.startswith("http") else f"{site_url}{image}"

    return render_template(
        "og_blog.html",
        {
            "title": title,
            "description": description,
            "image_url": image_url,
            "canonical_url": f"{site_url}/blog/{slug}",
            "site_name": settings.site_name,
            "published_at": post.published_at.isoformat() if post and post.published_at else None,
            "author_name": post.author_name if post else None,
        },
    )
