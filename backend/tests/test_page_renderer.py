"""
Tests for block rendering
"""
import pytest

from folio.core.errors import NotFoundError
from folio.models import Page, PageBlock
from folio.services.page_renderer import (BLOCK_RENDERERS, render_block,
                                          render_blocks, render_page)


def test_every_block_type_renders_empty_config():
    for block_type in BLOCK_RENDERERS:
        html = render_block(block_type, {})
        assert "block" in html


def test_unknown_block_type_placeholder():
    html = render_block("<carousel>", {"x": 1})
    assert "Unknown block type: &lt;carousel&gt;" in html


def test_config_values_are_escaped():
    html = render_block("text-section", {"title": "<script>alert(1)</script>"})
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_stats_items_sorted_by_order():
    html = render_block("stats-counter", {"items": [
        {"value": 2, "label": "second", "order": 1},
        {"value": 1, "label": "first", "order": 0, "suffix": "+"},
    ]})
    assert html.index("first") < html.index("second")
    assert "1+" in html


def test_render_blocks_skips_disabled_and_orders():
    blocks = [
        PageBlock(block_type="text-section", block_config={"title": "B"}, order_index=1, enabled=True),
        PageBlock(block_type="text-section", block_config={"title": "A"}, order_index=0, enabled=True),
        PageBlock(block_type="text-section", block_config={"title": "Off"}, order_index=2, enabled=False),
    ]
    rendered = render_blocks(blocks)
    assert len(rendered) == 2
    assert "A" in rendered[0] and "B" in rendered[1]


def test_render_page_uses_page_title(db):
    db.add(Page(slug="about", title="About me", description="Who I am"))
    db.add(PageBlock(page_slug="about", block_type="hero", block_config={"name": "Ada"}, order_index=0))
    db.commit()

    html = render_page(db, "about")
    assert "<title>About me</title>" in html
    assert "<h1>Ada</h1>" in html


def test_render_page_missing(db):
    with pytest.raises(NotFoundError):
        render_page(db, "nowhere")
