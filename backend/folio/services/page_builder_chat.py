"""
Conversational page builder: prompt, streaming and block actions
"""
import json
import re
from typing import Any, AsyncIterator, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from folio.core.ai_gateway import AIGateway, resolve_admin_provider
from folio.core.errors import NotFoundError, ValidationError
from folio.core.logging_config import LoggingConfig
from folio.models.page import PageBlock
from folio.services.entity_service import EntityService

logger = LoggingConfig.get_logger(__name__)

BLOCK_ACTIONS = ("create_block", "update_block", "suggest")

BLOCK_DEFINITIONS = """
## Available Block Types

You can create and configure these block types:

### 1. hero
Full-width hero section with name, tagline, features, and animations.
Config: { name, tagline, features: [{text, icon}], enable_animations, animation_style: "falling-stars"|"particles"|"gradient-shift" }

### 2. video-hero
Full-screen video background with overlay text.
Config: { video_url, title, subtitle, overlay_opacity: 0-1 }

### 3. about-split
Split layout with image and text content.
Config: { name, intro_text, additional_text, image_url, social_links: [{platform, url, enabled}] }

### 4. text-section
Simple text block for content.
Config: { title, content, alignment: "left"|"center"|"right" }

### 5. cta-banner
Call-to-action banner with button.
Config: { title, subtitle, button_text, button_url }

### 6. image-text
Image with accompanying text.
Config: { title, content, image_url, image_position: "left"|"right" }

### 7. expertise-grid
Grid of expertise/skills cards.
Config: { title, subtitle, items: [{title, description, icon}] }

### 8. featured-carousel
Carousel of featured items/logos.
Config: { title, subtitle, items: [{title, description, image_url}] }

### 9. project-showcase
Portfolio project showcase.
Config: { section_title, section_subtitle, projects: [...] }

### 10. chat-widget
AI chat widget for visitor interaction.
Config: { title, subtitle }

### 11. bento-grid
Modern asymmetric grid layout.
Config: { items: [{ id, title, description, icon, size: "small"|"medium"|"large", color }] }

### 12. stats-counter
Animated statistics with counting animation.
Config: { items: [{ id, value, prefix, suffix, label }] }

### 13. testimonial-carousel
Carousel with testimonials.
Config: { items: [{ id, quote, author, role, company, avatar_url }] }

### 14. parallax-section
Scroll parallax section.
Config: { title, content, background_image, height: "sm"|"md"|"lg", text_color: "light"|"dark" }

### 15. marquee
Infinite scrolling text ticker.
Config: { text, speed: "slow"|"normal"|"fast", direction: "left"|"right" }

### 16. spacer
Simple vertical spacing.
Config: { height: "sm"|"md"|"lg"|"xl" }

## Response Format

When creating blocks, respond with JSON in this format:
```json
{
  "action": "create_block" | "update_block" | "suggest",
  "block_type": "one of the types above",
  "config": { ... block configuration ... },
  "message": "Brief explanation to user"
}
```

For suggestions without creating, use action: "suggest" and provide recommendations in message.
"""

SYSTEM_PROMPT = f"""You are an AI page builder assistant. You help users create beautiful, modern landing pages by suggesting and configuring content blocks.

{BLOCK_DEFINITIONS}

## Guidelines

1. **Be conversational**: Chat naturally with the user about their needs.
2. **Suggest designs**: Based on their industry/goals, recommend block combinations.
3. **Fill with content**: Generate relevant placeholder content that matches their brand.
4. **Be creative**: Use modern blocks (bento-grid, stats-counter, testimonials) for impressive designs.
5. **Keep it simple**: Don't overwhelm. Suggest 3-5 blocks for a good landing page.

When the user confirms, output the JSON to create the block. Always provide helpful, encouraging responses."""

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```")


def page_context(current_blocks: Optional[List[Dict[str, Any]]]) -> str:
    """Describe the page being edited for the system prompt"""
    if current_blocks:
        types = ", ".join(str(block.get("block_type")) for block in current_blocks)
        return f"\n\nCurrent page has {len(current_blocks)} blocks: {types}"
    return "\n\nThe page is currently empty - this is a fresh start!"


def build_messages(messages: List[Dict[str, Any]], current_blocks: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [{"role": "system", "content": SYSTEM_PROMPT + page_context(current_blocks)}, *messages]


def parse_block_action(content: str) -> Optional[Dict[str, Any]]:
    """Extract a ```json fenced block action from assistant text"""
    match = _JSON_FENCE.search(content or "")
    if not match:
        return None
    try:
        parsed = json.loads(match.group(1))
    except json.JSONDecodeError:
        return None
    if isinstance(parsed, dict) and parsed.get("action") in BLOCK_ACTIONS:
        return parsed
    return None


class PageBuilderChat:
    def __init__(self, gateway: AIGateway, db: Optional[Session] = None):
        self.gateway = gateway
        self.db = db

    async def stream(
        self,
        messages: List[Dict[str, Any]],
        current_blocks: Optional[List[Dict[str, Any]]] = None,
        ai_config: Optional[Dict[str, Any]] = None,
    ) -> AsyncIterator[bytes]:
        """Open the upstream SSE stream; errors raise before streaming starts"""
        provider = resolve_admin_provider(ai_config)
        logger.info(
            f"Page builder chat: {len(messages)} message(s), {len(current_blocks or [])} block(s)",
            extra={"provider": provider.provider}
        )
        return await self.gateway.stream_chat(provider, build_messages(messages, current_blocks))

    def apply_action(self, page_slug: str, action: Dict[str, Any]) -> Optional[PageBlock]:
        """
        Persist a create_block/update_block action; suggestions are not stored.

        update_block needs a block_id of an existing block on page_slug.
        """
        if self.db is None:
            raise ValidationError("Database session required")
        kind = action.get("action")
        service = EntityService(self.db, PageBlock)
        if kind == "create_block":
            if not action.get("block_type"):
                raise ValidationError("block_type is required")
            return service.create({
                "page_slug": page_slug,
                "block_type": action["block_type"],
                "block_config": action.get("config") or {},
                "enabled": True,
            })
        if kind == "update_block":
            if not action.get("block_id"):
                raise ValidationError("block_id is required")
            try:
                block_id = UUID(str(action["block_id"]))
            except ValueError:
                raise ValidationError("block_id must be a UUID")
            block = service.get_or_raise(block_id)
            if block.page_slug != page_slug:
                raise NotFoundError(f"Block {block_id} not found on page '{page_slug}'")
            merged = dict(block.block_config or {})
            merged.update(action.get("config") or {})
            return service.update(block.id, {"block_config": merged})
        return None
