"""
XML sitemap of enabled pages and published blog posts
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from folio.core.config import Settings, get_settings
from folio.core.logging_config import LoggingConfig
from folio.core.templates import render_template
from folio.models.blog_post import BlogPost, BlogPostStatus
from folio.models.page import Page

logger = LoggingConfig.get_logger(__name__)

CACHE_CONTROL = "public, max-age=3600"


def _lastmod(value: Optional[datetime]) -> Optional[str]:
    return value.date().isoformat() if value else None


def _entry(loc: str, lastmod: Optional[str], changefreq: str, priority: str) -> Dict[str, Any]:
    return {"loc": loc, "lastmod": lastmod, "changefreq": changefreq, "priority": priority}


def sitemap_entries(db: Session, site_url: str) -> List[Dict[str, Any]]:
    """
    Homepage, other enabled pages, the blog index, then each published post.

    The homepage takes its lastmod from the page flagged is_main_landing.
    """
    pages = db.query(Page).filter(Page.enabled.is_(True)).order_by(Page.slug).all()
    landing = next((page for page in pages if page.is_main_landing), None)

    entries = [_entry(
        f"{site_url}/",
        _lastmod(landing.updated_at) if landing else date.today().isoformat(),
        "weekly",
        "1.0",
    )]
    for page in pages:
        if page is landing:
            continue
        entries.append(_entry(f"{site_url}/{page.slug}", _lastmod(page.updated_at), "monthly", "0.8"))

    posts = (
        db.query(BlogPost)
        .filter(BlogPost.status == BlogPostStatus.PUBLISHED.value)
        .order_by(BlogPost.published_at.desc())
        .all()
    )
    latest = posts[0] if posts else None
    entries.append(_entry(
        f"{site_url}/blog",
        _lastmod(latest.published_at or latest.updated_at) if latest else None,
        "weekly",
        "0.8",
    ))
    for post in posts:
        entries.append(_entry(
            f"{site_url}/blog/{post.slug}",
            _lastmod(post.updated_at or post.published_at),
            "monthly",
            "0.6",
        ))
    return entries


def fallback_sitemap(settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    site_url = settings.site_url.rstrip("/")
    entries = [_entry(f"{site_url}/", date.today().isoformat(), "weekly", "1.0")]
    return render_template("sitemap.xml", {"entries": entries})


def render_sitemap(db: Session, settings: Optional[Settings] = None) -> str:
    """Full sitemap; a database failure yields a homepage-only sitemap"""
    settings = settings or get_settings()
    try:
        entries = sitemap_entries(db, settings.site_url.rstrip("/"))
    except SQLAlchemyError as e:
        logger.error(f"Sitemap generation failed: {e}", exc_info=True)
        return fallback_sitemap(settings)
    logger.info(f"Generated sitemap with {len(entries)} URLs")
    return render_template("sitemap.xml", {"entries": entries})
