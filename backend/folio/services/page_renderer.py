"""
Page renderer: maps stored blocks to HTML sections by block_type
"""
from typing import Any, Callable, Dict, List, Optional

from markupsafe import Markup
from sqlalchemy.orm import Session

from folio.core.errors import NotFoundError
from folio.core.logging_config import LoggingConfig
from folio.core.templates import render_template
from folio.models.page import Page, PageBlock
from folio.services.ordering import sort_by_order

logger = LoggingConfig.get_logger(__name__)

BlockRenderer = Callable[[Dict[str, Any]], str]


def _template_renderer(template_name: str) -> BlockRenderer:
    def render(config: Dict[str, Any]) -> str:
        # dict.items would shadow a config key named "items" inside templates
        items = sort_by_order(config.get("items") or config.get("projects") or [])
        return render_template(f"blocks/{template_name}", {"config": config, "items": items})
    return render


BLOCK_RENDERERS: Dict[str, BlockRenderer] = {
    "hero": _template_renderer("hero.html"),
    "chat-widget": _template_renderer("chat_widget.html"),
    "text-section": _template_renderer("text_section.html"),
    "about-split": _template_renderer("about_split.html"),
    "featured-carousel": _template_renderer("featured_carousel.html"),
    "expertise-grid": _template_renderer("expertise_grid.html"),
    "project-showcase": _template_renderer("project_showcase.html"),
    "image-text": _template_renderer("image_text.html"),
    "cta-banner": _template_renderer("cta_banner.html"),
    "spacer": _template_renderer("spacer.html"),
    "video-hero": _template_renderer("video_hero.html"),
    "bento-grid": _template_renderer("bento_grid.html"),
    "stats-counter": _template_renderer("stats_counter.html"),
    "testimonial-carousel": _template_renderer("testimonial_carousel.html"),
    "parallax-section": _template_renderer("parallax_section.html"),
    "marquee": _template_renderer("marquee.html"),
}


def render_block(block_type: str, config: Optional[Dict[str, Any]]) -> str:
    """Render one block; unknown types render a placeholder"""
    renderer = BLOCK_RENDERERS.get(block_type)
    if renderer is None:
        logger.warning(f"Unknown block type: {block_type}")
        return render_template("blocks/unknown.html", {"block_type": block_type})
    return renderer(config or {})


def render_blocks(blocks: List[PageBlock]) -> List[str]:
    """Render enabled blocks in order_index order"""
    enabled = [block for block in blocks if block.enabled]
    return [render_block(block.block_type, block.block_config) for block in sort_by_order(enabled)]


def render_page(db: Session, slug: str) -> str:
    """
    Render a full page from its stored blocks.

    Raises:
        NotFoundError: no page with this slug and no blocks either
    """
    page = db.query(Page).filter(Page.slug == slug).first()
    blocks = (
        db.query(PageBlock)
        .filter(PageBlock.page_slug == slug, PageBlock.enabled.is_(True))
        .order_by(PageBlock.order_index)
        .all()
    )
    if page is None and not blocks:
        raise NotFoundError(f"Page '{slug}' not found")

    sections = [Markup(section) for section in render_blocks(blocks)]
    return render_template(
        "page.html",
        {
            "slug": slug,
            "title": page.title if page else slug,
            "description": page.description if page else None,
            "sections": sections,
        },
    )
