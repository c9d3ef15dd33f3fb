"""
Tests for the conversational page builder
"""
import httpx
import pytest

from folio.core.ai_gateway import AIGateway, get_ai_gateway
from folio.core.errors import NotFoundError, ValidationError
from folio.models import PageBlock
from folio.services.page_builder_chat import (SYSTEM_PROMPT, PageBuilderChat,
                                              build_messages,
                                              page_context,
                                              parse_block_action)


def test_page_context():
    assert "currently empty" in page_context([])
    context = page_context([{"block_type": "hero"}, {"block_type": "marquee"}])
    assert context == "\n\nCurrent page has 2 blocks: hero, marquee"


def test_build_messages_prepends_system():
    messages = build_messages([{"role": "user", "content": "hi"}], None)
    assert messages[0]["role"] == "system"
    assert messages[0]["content"].startswith(SYSTEM_PROMPT)
    assert messages[1] == {"role": "user", "content": "hi"}


def test_parse_block_action():
    text = 'Sure!\n```json\n{"action": "suggest", "message": "Try a hero"}\n```'
    assert parse_block_action(text)["action"] == "suggest"
    assert parse_block_action('```json\n{"action": "drop_table"}\n```') is None
    assert parse_block_action("```json\n{broken\n```") is None
    assert parse_block_action("no json here") is None


def test_apply_create_and_update(db):
    chat = PageBuilderChat(gateway=None, db=db)
    block = chat.apply_action("home", {"action": "create_block", "block_type": "hero", "config": {"name": "Ada"}})
    assert block.page_slug == "home"

    updated = chat.apply_action("home", {"action": "update_block", "block_id": str(block.id), "config": {"tagline": "Hi"}})
    assert updated.block_config == {"name": "Ada", "tagline": "Hi"}

    assert chat.apply_action("home", {"action": "suggest", "message": "ok"}) is None
    assert db.query(PageBlock).count() == 1


def test_apply_action_errors(db):
    chat = PageBuilderChat(gateway=None, db=db)
    with pytest.raises(ValidationError):
        chat.apply_action("home", {"action": "create_block"})
    with pytest.raises(ValidationError):
        chat.apply_action("home", {"action": "update_block", "block_id": "not-a-uuid"})
    with pytest.raises(NotFoundError):
        chat.apply_action("home", {"action": "update_block", "block_id": "00000000-0000-0000-0000-000000000001"})


def test_update_action_stays_on_its_page(client, db):
    other = client.post("/api/pages/about/blocks", json={"block_type": "hero", "block_config": {"title": "About"}}).json()
    response = client.post("/api/pages/home/builder-actions", json={
        "action": {"action": "update_block", "block_id": other["id"], "config": {"title": "Changed"}},
    })
    assert response.status_code == 404
    db.expire_all()
    assert db.query(PageBlock).one().block_config == {"title": "About"}


def test_stream_route_relays_sse(client, test_settings):
    from folio.main import app

    sse = b'data: {"choices":[{"delta":{"content":"Hi"}}]}\n\ndata: [DONE]\n\n'
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=sse))
    app.dependency_overrides[get_ai_gateway] = lambda: AIGateway(test_settings, transport=transport)

    response = client.post("/functions/v1/page-builder-chat", json={
        "messages": [{"role": "user", "content": "landing page for a bakery"}],
        "currentBlocks": [],
    })

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache"
    assert response.content == sse


def test_stream_route_rate_limited(client, test_settings):
    from folio.main import app

    transport = httpx.MockTransport(lambda request: httpx.Response(429, json={}))
    app.dependency_overrides[get_ai_gateway] = lambda: AIGateway(test_settings, transport=transport)

    response = client.post("/functions/v1/page-builder-chat", json={"messages": []})
    assert response.status_code == 429
    assert response.json()["error"] == "Rate limit exceeded. Please try again later."


def test_stream_route_requires_messages(client):
    response = client.post("/functions/v1/page-builder-chat", json={"messages": "hi"})
    assert response.status_code == 400
    assert response.json() == {"error": "messages must be a list"}
