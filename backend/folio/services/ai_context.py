"""
Prompt building from site context and stored profile blocks
"""
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from folio.core.config import get_settings
from folio.core.logging_config import LoggingConfig
from folio.models.page import PageBlock

logger = LoggingConfig.get_logger(__name__)

DEFAULT_BASE_PROMPT = "You are a helpful AI assistant."
BLOG_CONTENT_LIMIT = 500


def _format_repos(repos: List[Dict[str, Any]]) -> str:
    parts = []
    for repo in repos:
        section = f"\n### {repo.get('name', '')}\n"
        if repo.get("description"):
            section += f"{repo['description']}\n"
        if repo.get("enrichedDescription"):
            section += f"{repo['enrichedDescription']}\n"
        if repo.get("problemStatement"):
            section += f"**Problem solved:** {repo['problemStatement']}\n"
        if repo.get("whyItMatters"):
            section += f"**Why it matters:** {repo['whyItMatters']}\n"
        if repo.get("language"):
            section += f"**Language:** {repo['language']}\n"
        if repo.get("topics"):
            section += f"**Topics:** {', '.join(repo['topics'])}\n"
        section += f"**URL:** {repo.get('url', '')}\n"
        parts.append(section)
    return "\n".join(parts)


def _format_pages(pages: List[Dict[str, Any]]) -> str:
    parts = []
    for page in pages:
        section = f"\n### {page.get('title', '')} (/{page.get('slug', '')})\n"
        if page.get("content"):
            section += f"{page['content']}\n"
        for block in page.get("blocks") or []:
            if block.get("content"):
                section += f"- {block.get('type', '')}: {block['content']}\n"
        parts.append(section)
    return "\n".join(parts)


def _format_blogs(blogs: List[Dict[str, Any]]) -> str:
    parts = []
    for blog in blogs:
        section = f"\n### {blog.get('title', '')}\n"
        if blog.get("excerpt"):
            section += f"{blog['excerpt']}\n"
        if blog.get("content"):
            section += f"{blog['content'][:BLOG_CONTENT_LIMIT]}...\n"
        parts.append(section)
    return "\n".join(parts)


# (site_context key, heading, instruction, formatter)
CONTEXT_SECTIONS: List[tuple[str, str, str, Callable[[List[Dict[str, Any]]], str]]] = [
    (
        "repos",
        "GitHub Projects",
        "You have knowledge about {owner}'s GitHub projects. Use this to answer questions "
        "about technical work, coding skills, and project experience.",
        _format_repos,
    ),
    (
        "pages",
        "Website Content",
        "You have access to content from the website. Use this to provide accurate "
        "information about {owner} and their services.",
        _format_pages,
    ),
    (
        "blogs",
        "Blog Posts",
        "You have access to {owner}'s blog posts. Use these to discuss their thoughts, "
        "expertise, and insights.",
        _format_blogs,
    ),
]


def build_dynamic_prompt(base_prompt: Optional[str], site_context: Optional[Dict[str, Any]]) -> str:
    """Append a section per non-empty site context list to the base prompt"""
    prompt = base_prompt or DEFAULT_BASE_PROMPT
    if not site_context:
        return prompt

    owner = get_settings().owner_name
    active = []
    for key, title, instruction, formatter in CONTEXT_SECTIONS:
        data = site_context.get(key)
        if not isinstance(data, list) or not data:
            continue
        formatted = formatter(data)
        if formatted:
            prompt += f"\n\n## {title}\n{instruction.format(owner=owner)}\n{formatted}"
            active.append(f"{key}({len(data)})")

    logger.debug(f"Prompt built with {len(active)} context section(s): {active}")
    return prompt


ADMIN_PERSONA = """# Role
You are the CMS co-pilot for {owner}: an autonomous content management agent.

# Behavior
- Proactively suggest actions: research, drafts, publishing
- When you complete a task, immediately suggest the next logical step
- Use a concise, action-oriented tone; this is a work session
- Present review items clearly with approve/edit/reject options
- Keep responses short and actionable

# Capabilities
You can research topics, draft blog posts, create multichannel content (blog + LinkedIn + X),
check the review queue, approve pending tasks, and show site analytics.

# Workflow
1. If no specific request: check the review queue first and report status
2. After research: suggest drafting content
3. After drafting: suggest reviewing and publishing
4. Always confirm before publishing"""


def build_admin_prompt(site_context: Optional[Dict[str, Any]] = None) -> str:
    """CMS co-pilot persona plus site context"""
    persona = ADMIN_PERSONA.format(owner=get_settings().owner_name)
    return build_dynamic_prompt(persona, site_context)


def _block_text(block_type: str, config: Dict[str, Any]) -> List[str]:
    parts: List[str] = []
    if config.get("name"):
        parts.append(f"Name: {config['name']}")
    if config.get("tagline"):
        parts.append(f"Tagline: {config['tagline']}")
    if config.get("intro_text"):
        parts.append(f"About: {config['intro_text']}")
    if config.get("additional_text"):
        parts.append(str(config["additional_text"]))
    if isinstance(config.get("title"), str) and config["title"]:
        parts.append(config["title"])
    if isinstance(config.get("content"), str) and config["content"]:
        parts.append(config["content"])

    skills = config.get("skills")
    if isinstance(skills, list) and skills:
        parts.append("Skills: " + ", ".join(
            f"{s.get('name') or ''} ({s.get('level') or 0}%, {s.get('category') or ''})" for s in skills
        ))

    values = config.get("values")
    if isinstance(values, list) and values:
        parts.append("Values: " + "; ".join(f"{v.get('title')}: {v.get('description')}" for v in values))

    items = config.get("items")
    if isinstance(items, list):
        texts = [f"{i['title']}: {i.get('description') or ''}" for i in items if isinstance(i, dict) and i.get("title")]
        if texts:
            parts.append(f"{block_type}: " + "; ".join(texts))

    projects = config.get("projects")
    if isinstance(projects, list):
        for project in projects:
            line = [f"Project: {project.get('title')}"]
            if project.get("description"):
                line.append(project["description"])
            if project.get("problem_statement"):
                line.append(f"Problem: {project['problem_statement']}")
            if project.get("why_built"):
                line.append(f"Why: {project['why_built']}")
            parts.append(" - ".join(line))

    features = config.get("features")
    if isinstance(features, list):
        texts = [f.get("text") for f in features if isinstance(f, dict) and f.get("text")]
        if texts:
            parts.append("Features: " + ", ".join(texts))
    return parts


def load_resume_context(db: Session) -> Optional[str]:
    """Flatten enabled page blocks into a profile text, or None when empty"""
    blocks = (
        db.query(PageBlock)
        .filter(PageBlock.enabled.is_(True))
        .order_by(PageBlock.order_index)
        .all()
    )
    sections = []
    for block in blocks:
        if not block.block_config:
            continue
        parts = _block_text(block.block_type, dict(block.block_config))
        if parts:
            sections.append(f"[{block.page_slug}/{block.block_type}]\n" + "\n".join(parts))

    if not sections:
        return None
    logger.info(f"Loaded resume context from {len(sections)} block section(s)")
    return "\n\n".join(sections)


def build_site_context(db: Session) -> Dict[str, Any]:
    """Site context for the chat agent from enabled pages and published blog posts"""
    from folio.models.blog_post import BlogPost, BlogPostStatus
    from folio.models.page import Page

    pages = []
    for page in db.query(Page).filter(Page.enabled.is_(True)).order_by(Page.order_index).all():
        blocks = (
            db.query(PageBlock)
            .filter(PageBlock.page_slug == page.slug, PageBlock.enabled.is_(True))
            .order_by(PageBlock.order_index)
            .all()
        )
        pages.append({
            "title": page.title,
            "slug": page.slug,
            "content": page.description or "",
            "blocks": [
                {"type": block.block_type, "content": " ".join(_block_text(block.block_type, dict(block.block_config or {})))}
                for block in blocks
            ],
        })

    posts = (
        db.query(BlogPost)
        .filter(BlogPost.status == BlogPostStatus.PUBLISHED.value)
        .order_by(BlogPost.published_at.desc())
        .limit(20)
        .all()
    )
    blogs = [{"title": post.title, "excerpt": post.excerpt, "content": post.content} for post in posts]
    return {"pages": pages, "blogs": blogs}
