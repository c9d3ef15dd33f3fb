"""
Tests for the autopilot agent
"""
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from folio.core.errors import AIGatewayError, FunctionError
from folio.models import AgentTask, BlogPost, NewsletterCampaign
from folio.services.autopilot import (AutopilotService, dedupe_by_hostname,
                                      parse_blog_draft, parse_channel_drafts,
                                      parse_json_array,
                                      parse_newsletter_draft)
from folio.services.module_service import ModuleService

BLOG_TEXT = """# Agents in Production

Agents are everywhere now.

## Why it matters
Because.

---
METADATA:
title: Agents in Production Today
excerpt: What it takes to ship agents.
seo_description: A practical look at shipping agents.
seo_keywords: ai, agents , production
"""


def _completion(text):
    return {"choices": [{"message": {"content": text}}]}


def _gateway(settings, *texts):
    gateway = MagicMock()
    gateway.settings = settings
    gateway.complete = AsyncMock(side_effect=[_completion(t) for t in texts])
    return gateway


def _firecrawl(research="## Source\nfindings", search=None, scrape="page body"):
    firecrawl = MagicMock()
    firecrawl.research = AsyncMock(return_value=research)
    firecrawl.search = AsyncMock(return_value=search or [])
    firecrawl.scrape = AsyncMock(return_value=scrape)
    return firecrawl


def test_parse_json_array():
    assert parse_json_array('```json\n["a", "b"]\n```') == ["a", "b"]
    assert parse_json_array('{"a": 1}') is None
    assert parse_json_array("nope") is None


def test_parse_blog_draft():
    draft = parse_blog_draft(BLOG_TEXT, "fallback topic")
    assert draft["title"] == "Agents in Production"
    assert draft["content"].startswith("Agents are everywhere now.")
    assert "METADATA" not in draft["content"]
    assert draft["excerpt"] == "What it takes to ship agents."
    assert draft["seo_title"] == "Agents in Production Today"
    assert draft["seo_keywords"] == ["ai", "agents", "production"]


def test_parse_blog_draft_without_metadata():
    draft = parse_blog_draft("Just some text without a heading", "My topic")
    assert draft["title"] == "My topic"
    assert draft["excerpt"] == "Just some text without a heading"
    assert draft["seo_keywords"] is None


def test_parse_newsletter_draft():
    draft = parse_newsletter_draft("Subject: This week in AI\n\nHello readers!")
    assert draft == {"subject": "This week in AI", "content": "Hello readers!"}

    fallback = parse_newsletter_draft("No subject here", today=datetime(2026, 3, 7))
    assert fallback["subject"] == "Weekly Digest - 3/7/2026"


def test_parse_channel_drafts():
    text = "=== BLOG ===\n# Post\nbody\n=== X ===\nshort take\n=== LINKEDIN ===\nnot requested"
    assert parse_channel_drafts(text, ["blog", "x"]) == {"blog": "# Post\nbody", "x": "short take"}
    assert parse_channel_drafts("no sections", ["linkedin"]) == {"linkedin": "no sections"}


def test_dedupe_by_hostname():
    results = [
        {"url": "https://a.com/1"},
        {"url": "https://a.com/2"},
        {"url": "not a url"},
        {"url": "https://b.com/"},
    ]
    assert [r["url"] for r in dedupe_by_hostname(results)] == ["https://a.com/1", "https://b.com/"]


@pytest.mark.asyncio
async def test_blog_draft_creates_post_for_review(db, test_settings):
    service = AutopilotService(db, _gateway(test_settings, BLOG_TEXT), _firecrawl())
    result = await service.run({"action": "blog_draft", "topic": "AI agents"})

    assert result["success"] is True
    post = db.query(BlogPost).one()
    assert post.status == "draft"
    assert post.source == "agent"
    assert post.slug.startswith("agents-in-production-")

    task = db.query(AgentTask).one()
    assert task.status == "needs_review"
    assert task.output_data["blog_post_id"] == str(post.id)
    assert task.completed_at is not None


@pytest.mark.asyncio
async def test_failed_generation_marks_task_failed(db, test_settings):
    gateway = _gateway(test_settings)
    gateway.complete = AsyncMock(side_effect=AIGatewayError("AI service error. Please try again.", 500))
    service = AutopilotService(db, gateway, _firecrawl())

    with pytest.raises(FunctionError) as exc:
        await service.run({"action": "research", "topic": "x"})
    assert exc.value.to_body() == {"success": False, "error": "AI service error. Please try again."}

    task = db.query(AgentTask).one()
    assert task.status == "failed"
    assert task.output_data == {"error": "AI service error. Please try again."}


@pytest.mark.asyncio
async def test_research_uses_module_defaults(db, test_settings):
    ModuleService(db).upsert("autopilot", {"default_topic": "Rust", "default_sources": ["https://rust.example"]})
    firecrawl = _firecrawl()
    service = AutopilotService(db, _gateway(test_settings, "analysis"), firecrawl)

    result = await service.run({"action": "research"})

    assert result["analysis"] == "analysis"
    firecrawl.research.assert_awaited_once_with("Rust", ["https://rust.example"])
    task = db.query(AgentTask).one()
    assert task.status == "completed"
    assert task.output_data["topic"] == "Rust"


@pytest.mark.asyncio
async def test_research_unknown_task_id(db, test_settings):
    service = AutopilotService(db, _gateway(test_settings), _firecrawl())
    with pytest.raises(FunctionError, match="not found"):
        await service.run({"action": "research", "taskId": "not-a-uuid"})


@pytest.mark.asyncio
async def test_newsletter_draft_creates_campaign(db, test_settings):
    db.add(BlogPost(title="Recent", slug="recent", content="x", excerpt="short"))
    db.commit()
    gateway = _gateway(test_settings, "Subject: Weekly\n\nBody text")
    result = await AutopilotService(db, gateway, _firecrawl()).run({"action": "newsletter_draft"})

    campaign = db.query(NewsletterCampaign).one()
    assert result["campaignId"] == str(campaign.id)
    assert campaign.subject == "Weekly"
    assert campaign.status == "draft"
    prompt = gateway.complete.call_args.args[1][1]["content"]
    assert "**Recent**: short" in prompt


@pytest.mark.asyncio
async def test_scout_falls_back_when_ranking_fails(db, test_settings):
    firecrawl = _firecrawl(search=[
        {"url": "https://a.com/x", "title": "A"},
        {"url": "https://a.com/y", "title": "A again"},
        {"url": "https://b.com/z", "title": "B"},
    ])
    gateway = _gateway(test_settings, "not json", "also not json", "The synthesis")
    result = await AutopilotService(db, gateway, firecrawl).run({"action": "scout", "topic": "edge AI"})

    assert firecrawl.search.await_count == 3
    assert [s["url"] for s in result["sources"]] == ["https://a.com/x", "https://b.com/z"]
    assert all(s["rationale"] == "Auto-discovered" for s in result["sources"])
    assert result["synthesis"] == "The synthesis"

    task = db.query(AgentTask).one()
    assert task.output_data["watch_list"] == ["a.com", "b.com"]
    assert task.output_data["scraped_count"] == 2
    assert task.output_data["search_queries"][0] == "edge AI latest trends"


@pytest.mark.asyncio
async def test_scout_ignores_ranked_sources_without_string_urls(db, test_settings):
    firecrawl = _firecrawl(search=[{"url": "https://a.com/x", "title": "A"}])
    gateway = _gateway(test_settings, "[\"q1\"]", '[{"url": 5, "title": "Bad"}]', "Synthesis")
    result = await AutopilotService(db, gateway, firecrawl).run({"action": "scout", "topic": "edge AI"})

    assert [s["url"] for s in result["sources"]] == ["https://a.com/x"]
    assert result["sources"][0]["rationale"] == "Auto-discovered"


@pytest.mark.asyncio
async def test_database_failure_reports_success_false(db, test_settings, monkeypatch):
    monkeypatch.setattr(db, "commit", MagicMock(side_effect=OperationalError("INSERT", {}, Exception("database is locked"))))
    service = AutopilotService(db, _gateway(test_settings, "analysis"), _firecrawl())

    with pytest.raises(FunctionError) as exc:
        await service.run({"action": "research", "topic": "x"})
    body = exc.value.to_body()
    assert body["success"] is False
    assert "database is locked" in body["error"]


@pytest.mark.asyncio
async def test_multichannel_draft(db, test_settings):
    gateway = _gateway(test_settings, "=== LINKEDIN ===\nPost\n=== X ===\nTweet")
    result = await AutopilotService(db, gateway, _firecrawl()).run({
        "action": "multichannel_draft", "channels": ["linkedin", "x", "tiktok"],
    })
    assert result["channels"] == ["linkedin", "x"]
    assert result["drafts"] == {"linkedin": "Post", "x": "Tweet"}
    assert db.query(AgentTask).one().status == "needs_review"


@pytest.mark.asyncio
async def test_toggle_and_list_workflows(db, test_settings):
    service = AutopilotService(db, _gateway(test_settings), _firecrawl())
    toggled = await service.run({"action": "toggle_workflow", "jobName": "weekly-newsletter", "schedule": "0 9 * * 1"})
    assert toggled == {"success": True, "jobName": "weekly-newsletter", "active": True, "schedule": "0 9 * * 1"}

    await service.run({"action": "toggle_workflow", "jobName": "weekly-newsletter", "active": False})
    listing = await service.run({"action": "workflows"})
    assert listing["workflows"]["weekly-newsletter"] == {"active": False, "schedule": "0 9 * * 1"}
    assert listing["modules"]["autopilot"]["enabled"] is True


@pytest.mark.asyncio
async def test_toggle_requires_job_name(db, test_settings):
    with pytest.raises(FunctionError, match="jobName required"):
        await AutopilotService(db, _gateway(test_settings), _firecrawl()).run({"action": "toggle_workflow"})


def test_unknown_action_via_function(client):
    response = client.post("/functions/v1/agent-autopilot", json={"action": "dance"})
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Unknown action: dance"}
