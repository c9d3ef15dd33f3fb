"""
Autopilot agent: research, content drafting and source scouting

Every action except the workflow ones records its run in agent_tasks:
running -> completed | needs_review | failed.
"""
import asyncio
import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse
from uuid import UUID

from sqlalchemy.orm import Session

from folio.core.ai_gateway import AIGateway, extract_content, resolve_admin_provider
from folio.core.errors import FolioError, FunctionError, NotFoundError, ValidationError
from folio.core.logging_config import LoggingConfig
from folio.core.metrics import autopilot_tasks_total
from folio.models.agent_task import AgentTask, AgentTaskStatus
from folio.models.blog_post import BlogPost, BlogPostSource, BlogPostStatus
from folio.models.newsletter import CampaignStatus, NewsletterCampaign
from folio.models.types import utcnow
from folio.services.blog_service import slugify
from folio.services.firecrawl import FirecrawlClient
from folio.services.module_service import ModuleService

logger = LoggingConfig.get_logger(__name__)

DEFAULT_TOPIC = "AI agents, agentic web, digital twins trends"
DEFAULT_SOURCES = ["https://news.ycombinator.com"]
CHANNELS = ("blog", "linkedin", "x")
ACTIONS = ("research", "blog_draft", "newsletter_draft", "scout", "multichannel_draft", "workflows", "toggle_workflow")

RESEARCH_PROMPT = """You are a research analyst. Analyze these search results and create a structured summary with:
1. Key findings (3-5 bullet points)
2. Trending angles or hot takes
3. How this relates to software development, AI, and digital transformation
4. Suggested blog post angles (2-3 ideas with working titles)

Be concise and actionable."""

BLOG_PROMPT = """You are a professional tech blogger writing for a personal brand site. Write an engaging, SEO-optimized blog post.

Output format (use these exact headers):
# [Blog Title]

[Full blog content in markdown, 800-1200 words]

---
METADATA:
title: [SEO title, max 60 chars]
excerpt: [Compelling excerpt, max 160 chars]
seo_description: [Meta description, max 160 chars]
seo_keywords: [comma-separated keywords]

Style: Professional but approachable, with practical insights. Use subheadings, code examples where relevant, and end with a call-to-action or thought-provoking question."""

NEWSLETTER_PROMPT = """You are writing a professional weekly newsletter for a tech professional's personal brand.

Format:
Subject: [Compelling subject line]

[Newsletter content in markdown. Include:
- A warm greeting
- Highlights from recent blog posts with links
- Key insights from research
- A personal note or industry observation
- Call to action]

Keep it concise (300-500 words), engaging, and valuable."""

ANGLES_PROMPT = """You are a research strategist. Given a topic, generate exactly 3 diverse web search queries that would find the highest-signal sources. Cover different angles: technical/academic, industry/news, and tools/community.

Return ONLY a JSON array of 3 strings, nothing else. Example:
["AI agent frameworks comparison", "agentic AI enterprise adoption trends", "open source AI agent projects GitHub"]"""

RANKING_SYSTEM_PROMPT = "You are a source quality analyst. Return only valid JSON."
SYNTHESIS_SYSTEM_PROMPT = "You are a research analyst creating an intelligence brief."

MULTICHANNEL_PROMPT = """You are a content strategist for a tech professional's personal brand. From the research, write one piece of content per requested channel.

Channel guidelines:
- blog: markdown article of 600-900 words with a "# Title" heading
- linkedin: professional post under 1300 characters with a hook, 3-5 short paragraphs and 3 hashtags
- x: single post under 280 characters

Output each channel under its own header exactly like:
=== BLOG ===
...
=== LINKEDIN ===
...
=== X ===
...

Only include the requested channels."""

_CODE_FENCE = re.compile(r"```(?:json)?\n?")
_CHANNEL_HEADER = re.compile(r"^===\s*(BLOG|LINKEDIN|X)\s*===\s*$", re.MULTILINE)


def parse_json_array(raw: str) -> Optional[List[Any]]:
    """JSON array from model output, tolerating code fences"""
    cleaned = _CODE_FENCE.sub("", raw or "").replace("```", "").strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, list) else None


def parse_blog_draft(text: str, topic: str) -> Dict[str, Any]:
    """
    Split a generated post into title, body and trailing METADATA fields.

    Returns:
        dict with title, content, excerpt, seo_title, seo_description, seo_keywords
    """
    title = next((line[2:].strip() for line in text.split("\n") if line.startswith("# ")), "") or topic

    metadata_start = text.find("METADATA:")
    content = text
    meta: Dict[str, str] = {}
    if metadata_start > 0:
        content = re.sub(r"---\s*$", "", text[:metadata_start]).strip()
        block = text[metadata_start:]
        for key in ("title", "excerpt", "seo_description", "seo_keywords"):
            match = re.search(rf"^{key}:\s*(.+)", block, re.MULTILINE)
            meta[key] = match.group(1).strip() if match else ""

    keywords = [k.strip() for k in meta.get("seo_keywords", "").split(",") if k.strip()]
    excerpt = meta.get("excerpt", "")
    return {
        "title": title,
        "content": re.sub(r"^# .+\n", "", content, count=1).strip(),
        "excerpt": excerpt or content[:155],
        "seo_title": meta.get("title") or title,
        "seo_description": meta.get("seo_description") or excerpt,
        "seo_keywords": keywords or None,
    }


def parse_newsletter_draft(text: str, today: Optional[datetime] = None) -> Dict[str, str]:
    """Subject line (with a dated fallback) and the remaining body"""
    match = re.search(r"Subject:\s*(.+)", text)
    if match and match.group(1).strip():
        subject = match.group(1).strip()
    else:
        today = today or datetime.now(timezone.utc)
        subject = f"Weekly Digest - {today.month}/{today.day}/{today.year}"
    content = re.sub(r"Subject:\s*.+\n", "", text, count=1).strip()
    return {"subject": subject, "content": content}


def parse_channel_drafts(text: str, channels: List[str]) -> Dict[str, str]:
    """Per-channel text from "=== CHANNEL ===" sections; unsectioned output goes to the first channel"""
    headers = list(_CHANNEL_HEADER.finditer(text))
    if not headers:
        return {channels[0]: text.strip()} if channels else {}
    drafts: Dict[str, str] = {}
    for i, header in enumerate(headers):
        channel = header.group(1).lower()
        end = headers[i + 1].start() if i + 1 < len(headers) else len(text)
        if channel in channels:
            drafts[channel] = text[header.end():end].strip()
    return drafts


def hostname(url: str) -> Optional[str]:
    if not isinstance(url, str):
        return None
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


def dedupe_by_hostname(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep the first result per hostname; drop results without a parseable URL"""
    seen = set()
    unique = []
    for result in results:
        host = hostname(result.get("url") or "")
        if not host or host in seen:
            continue
        seen.add(host)
        unique.append(result)
    return unique


class AutopilotService:
    def __init__(self, db: Session, gateway: AIGateway, firecrawl: Optional[FirecrawlClient] = None):
        self.db = db
        self.gateway = gateway
        self.firecrawl = firecrawl or FirecrawlClient(gateway.settings)
        self.modules = ModuleService(db)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Dispatch one autopilot action.

        Raises:
            FunctionError: any failure, with success: false in the body
        """
        action = body.get("action")
        config = self.modules.get_config("autopilot")
        topic = body.get("topic") or config.get("default_topic") or DEFAULT_TOPIC
        sources = body.get("sources") or config.get("default_sources") or DEFAULT_SOURCES
        logger.info(f"Autopilot action: {action}, topic: {topic}")

        try:
            if action == "workflows":
                return self.workflows()
            if action == "toggle_workflow":
                return self.toggle_workflow(body.get("jobName"), body.get("active", True), body.get("schedule"))
            if action == "research":
                return await self.research(topic, sources, body.get("taskId"))
            if action == "blog_draft":
                return await self.blog_draft(topic, sources)
            if action == "newsletter_draft":
                return await self.newsletter_draft()
            if action == "scout":
                return await self.scout(topic)
            if action == "multichannel_draft":
                return await self.multichannel_draft(topic, sources, body.get("channels"))
            raise ValidationError(f"Unknown action: {action}")
        except FolioError as e:
            logger.error(f"Autopilot {action} failed: {e.message}")
            raise FunctionError(e.message, 500, include_success=True) from e
        except Exception as e:
            logger.error(f"Autopilot {action} failed: {e}", exc_info=True)
            raise FunctionError(str(e) or "Unknown error", 500, include_success=True) from e

    # ------------------------------------------------------------------
    # Task bookkeeping
    # ------------------------------------------------------------------

    def _commit(self, obj=None):
        try:
            self.db.commit()
            if obj is not None:
                self.db.refresh(obj)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error saving autopilot state: {e}", exc_info=True)
            raise
        return obj

    def _start_task(self, task_type: str, input_data: Dict[str, Any]) -> AgentTask:
        task = AgentTask(task_type=task_type, status=AgentTaskStatus.RUNNING.value, input_data=input_data)
        self.db.add(task)
        return self._commit(task)

    def _finish_task(self, task: AgentTask, status: AgentTaskStatus, output: Dict[str, Any]) -> None:
        task.status = status.value
        task.completed_at = utcnow()
        task.output_data = output
        self._commit()
        autopilot_tasks_total.labels(task_type=task.task_type, status=status.value).inc()
        logger.info(f"Autopilot task {task.id} ({task.task_type}) -> {status.value}")

    def _fail_task(self, task: AgentTask, error: Exception) -> None:
        self.db.rollback()
        task.status = AgentTaskStatus.FAILED.value
        task.output_data = {"error": getattr(error, "message", None) or str(error) or "Unknown error"}
        self._commit()
        autopilot_tasks_total.labels(task_type=task.task_type, status=AgentTaskStatus.FAILED.value).inc()

    async def _generate(self, prompt: str, system_prompt: str) -> str:
        provider = resolve_admin_provider(None, self.gateway.settings)
        data = await self.gateway.complete(
            provider,
            [{"role": "system", "content": system_prompt}, {"role": "user", "content": prompt}],
        )
        return extract_content(data)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def research(self, topic: str, sources: List[str], task_id: Optional[str] = None) -> Dict[str, Any]:
        if task_id:
            try:
                task = self.db.query(AgentTask).filter(AgentTask.id == UUID(str(task_id))).first()
            except ValueError:
                task = None
            if task is None:
                raise NotFoundError(f"Task {task_id} not found")
            task.status = AgentTaskStatus.RUNNING.value
            self._commit(task)
        else:
            task = self._start_task("research", {"topic": topic, "sources": sources})

        try:
            research = await self.firecrawl.research(topic, sources)
            analysis = await self._generate(f'Research results for "{topic}":\n\n{research}', RESEARCH_PROMPT)
            self._finish_task(task, AgentTaskStatus.COMPLETED, {
                "research_summary": analysis,
                "raw_sources": sources,
                "topic": topic,
            })
        except Exception as e:
            self._fail_task(task, e)
            raise
        return {"success": True, "taskId": str(task.id), "analysis": analysis}

    async def blog_draft(self, topic: str, sources: List[str]) -> Dict[str, Any]:
        task = self._start_task("blog_draft", {"topic": topic, "sources": sources})
        try:
            research = await self.firecrawl.research(topic, sources)
            text = await self._generate(f'Write a blog post about: "{topic}"\n\nResearch:\n{research}', BLOG_PROMPT)
            draft = parse_blog_draft(text, topic)
            slug = slugify(draft["title"], max_length=200)

            post = BlogPost(
                slug=f"{slug}-{int(utcnow().timestamp() * 1000)}",
                status=BlogPostStatus.DRAFT.value,
                source=BlogPostSource.AGENT.value,
                **draft,
            )
            self.db.add(post)
            self._commit(post)

            self._finish_task(task, AgentTaskStatus.NEEDS_REVIEW, {
                "blog_post_id": str(post.id),
                "title": draft["title"],
                "slug": slug,
                "topic": topic,
            })
        except Exception as e:
            self._fail_task(task, e)
            raise
        return {"success": True, "taskId": str(task.id), "postId": str(post.id), "title": draft["title"]}

    def _recent_activity(self) -> str:
        since = utcnow() - timedelta(days=7)
        blogs = (
            self.db.query(BlogPost)
            .filter(BlogPost.created_at >= since)
            .order_by(BlogPost.created_at.desc())
            .limit(10)
            .all()
        )
        tasks = (
            self.db.query(AgentTask)
            .filter(AgentTask.status == AgentTaskStatus.COMPLETED.value, AgentTask.created_at >= since)
            .limit(10)
            .all()
        )
        lines = ["## Recent Blog Posts"]
        lines.extend(f"- **{post.title}**: {post.excerpt or ''}" for post in blogs)
        lines.extend(["", "## Recent Research"])
        for task in tasks:
            if task.task_type != "research":
                continue
            data = task.output_data or {}
            lines.append(f"- {data.get('topic') or 'Research'}: {(data.get('research_summary') or '')[:200]}")
        return "\n".join(lines)

    async def newsletter_draft(self) -> Dict[str, Any]:
        task = self._start_task("newsletter_draft", {"type": "weekly_digest"})
        try:
            context = self._recent_activity()
            text = await self._generate(
                f"Create a weekly newsletter digest based on this activity:\n\n{context}",
                NEWSLETTER_PROMPT,
            )
            draft = parse_newsletter_draft(text)
            campaign = NewsletterCampaign(
                subject=draft["subject"],
                content=draft["content"],
                status=CampaignStatus.DRAFT.value,
                agent_notes="Auto-generated weekly digest by Autopilot agent",
            )
            self.db.add(campaign)
            self._commit(campaign)

            self._finish_task(task, AgentTaskStatus.NEEDS_REVIEW, {
                "campaign_id": str(campaign.id),
                "subject": draft["subject"],
            })
        except Exception as e:
            self._fail_task(task, e)
            raise
        return {"success": True, "taskId": str(task.id), "campaignId": str(campaign.id), "subject": draft["subject"]}

    async def _search_angle(self, query: str) -> List[Dict[str, Any]]:
        items = await self.firecrawl.search(query)
        return [
            {
                "url": item.get("url"),
                "title": item.get("title") or item.get("url"),
                "description": item.get("description") or "",
                "query": query,
            }
            for item in items
        ]

    async def _scrape_source(self, source: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        markdown = await self.firecrawl.scrape(source["url"])
        return {"url": source["url"], "title": source.get("title"), "markdown": markdown}

    async def scout(self, topic: str) -> Dict[str, Any]:
        """Discover, rank and deep-read the best sources for a topic"""
        task = self._start_task("scout", {"topic": topic})
        try:
            queries = parse_json_array(await self._generate(f'Topic: "{topic}"', ANGLES_PROMPT))
            if not queries:
                queries = [f"{topic} latest trends", f"{topic} tools frameworks", f"{topic} expert analysis"]
            queries = [str(q) for q in queries]
            logger.info(f"Scout search queries: {queries}")

            searched = await asyncio.gather(*(self._search_angle(q) for q in queries), return_exceptions=True)
            results = []
            for query, outcome in zip(queries, searched):
                if isinstance(outcome, Exception):
                    logger.error(f"Scout search failed for '{query}': {outcome}")
                    continue
                results.extend(outcome)
            unique = dedupe_by_hostname(results)
            logger.info(f"Scout: {len(results)} raw results -> {len(unique)} unique domains")

            listing = "\n".join(
                f"{i}. {s['title']} - {s['url']}\n   {s['description']}" for i, s in enumerate(unique, start=1)
            )
            ranking_prompt = (
                f'Rank these sources for the topic "{topic}". Score each 1-10 on relevance, authority, and '
                "freshness. Return ONLY a JSON array sorted by score descending.\n\n"
                f"Sources:\n{listing}\n\n"
                "Return format (JSON array only, no markdown):\n"
                '[{"url":"...","title":"...","score":9,"rationale":"Why this source is valuable"}]\n\n'
                "Return top 8 maximum."
            )
            ranked = parse_json_array(await self._generate(ranking_prompt, RANKING_SYSTEM_PROMPT))
            ranked = [s for s in ranked or [] if isinstance(s, dict) and isinstance(s.get("url"), str) and s["url"]]
            if not ranked:
                ranked = [
                    {"url": s["url"], "title": s["title"], "score": 5, "rationale": "Auto-discovered"}
                    for s in unique[:8]
                ]

            scraped_results = await asyncio.gather(
                *(self._scrape_source(s) for s in ranked[:5]), return_exceptions=True
            )
            scraped = [s for s in scraped_results if isinstance(s, dict)]

            sections = "\n\n---\n\n".join(f"## {s['title']}\n{s['markdown']}" for s in scraped)
            synthesis_prompt = (
                f'Based on deep-reading these {len(scraped)} sources about "{topic}", provide:\n\n'
                f"{sections}\n\n"
                "Create a synthesis with:\n"
                "1. **Key Takeaways** (3-5 bullet points of the most important insights)\n"
                "2. **Watch List** (domains/publications worth following regularly for this topic)\n"
                "3. **Content Angles** (2-3 specific blog post ideas based on what's trending)\n\n"
                "Be concise and actionable."
            )
            synthesis = await self._generate(synthesis_prompt, SYNTHESIS_SYSTEM_PROMPT)
            watch_list = [hostname(s["url"]) or s["url"] for s in ranked[:5]]

            self._finish_task(task, AgentTaskStatus.COMPLETED, {
                "topic": topic,
                "sources": ranked,
                "synthesis": synthesis,
                "watch_list": watch_list,
                "search_queries": queries,
                "scraped_count": len(scraped),
            })
        except Exception as e:
            self._fail_task(task, e)
            raise
        return {"success": True, "taskId": str(task.id), "sources": ranked, "synthesis": synthesis}

    async def multichannel_draft(
        self, topic: str, sources: List[str], channels: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        channels = [c for c in (channels or CHANNELS) if c in CHANNELS]
        if not channels:
            raise ValidationError(f"channels must be any of: {', '.join(CHANNELS)}")

        task = self._start_task("multichannel_draft", {"topic": topic, "sources": sources, "channels": channels})
        try:
            research = await self.firecrawl.research(topic, sources)
            text = await self._generate(
                f'Topic: "{topic}"\nChannels: {", ".join(channels)}\n\nResearch:\n{research}',
                MULTICHANNEL_PROMPT,
            )
            drafts = parse_channel_drafts(text, channels)
            self._finish_task(task, AgentTaskStatus.NEEDS_REVIEW, {
                "topic": topic,
                "channels": channels,
                "drafts": drafts,
            })
        except Exception as e:
            self._fail_task(task, e)
            raise
        return {"success": True, "taskId": str(task.id), "channels": channels, "drafts": drafts}

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    def workflows(self) -> Dict[str, Any]:
        """Autopilot module state, stored schedules and the latest run per task type"""
        module = self.modules.get_module("autopilot")
        config = dict(module.module_config or {}) if module else {}

        last_run: Dict[str, Dict[str, Any]] = {}
        latest = self.db.query(AgentTask).order_by(AgentTask.created_at.desc()).limit(20).all()
        for task in latest:
            if task.task_type not in last_run:
                last_run[task.task_type] = {
                    "status": task.status,
                    "created_at": task.created_at.isoformat() if task.created_at else None,
                    "completed_at": task.completed_at.isoformat() if task.completed_at else None,
                }

        return {
            "success": True,
            "workflows": config.get("workflows") or {},
            "modules": {
                "autopilot": {"config": config, "enabled": module.enabled if module else False},
            },
            "lastRun": last_run,
        }

    def toggle_workflow(self, job_name: Optional[str], active: bool = True, schedule: Optional[str] = None) -> Dict[str, Any]:
        if not job_name:
            raise ValidationError("jobName required for toggle_workflow")
        config = self.modules.get_config("autopilot")
        workflows = dict(config.get("workflows") or {})
        entry = dict(workflows.get(job_name) or {})
        entry["active"] = bool(active)
        if schedule:
            entry["schedule"] = schedule
        workflows[job_name] = entry
        self.modules.merge_config("autopilot", {"workflows": workflows})
        logger.info(f"Workflow {job_name} set active={active}, schedule={entry.get('schedule')}")
        return {"success": True, "jobName": job_name, "active": bool(active), "schedule": entry.get("schedule")}
