"""
Firecrawl web search and scraping client used by the autopilot
"""
from typing import Any, Dict, List, Optional

import httpx

from folio.core.config import Settings, get_settings
from folio.core.errors import FunctionError
from folio.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

SEARCH_LIMIT = 5
SEARCH_CONTENT_CHARS = 1500
SCRAPE_CONTENT_CHARS = 2000


class FirecrawlClient:
    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        if not self.settings.firecrawl_api_key:
            raise FunctionError("Firecrawl not configured", 500)
        return httpx.AsyncClient(
            base_url=self.settings.firecrawl_api_url,
            timeout=self.settings.http_timeout_seconds,
            transport=self._transport,
            headers={"Authorization": f"Bearer {self.settings.firecrawl_api_key}"},
        )

    async def search(self, query: str, limit: int = SEARCH_LIMIT, with_content: bool = False) -> List[Dict[str, Any]]:
        """
        Web search.

        Returns raw result items ({url, title, description, markdown?});
        an upstream error yields an empty list.
        """
        body: Dict[str, Any] = {"query": query, "limit": limit}
        if with_content:
            body["scrapeOptions"] = {"formats": ["markdown"]}
        async with self._client() as client:
            response = await client.post("/search", json=body)
        if response.status_code >= 400:
            logger.warning(f"Firecrawl search failed [{response.status_code}] for '{query}'")
            return []
        return (response.json().get("data") or [])[:limit]

    async def scrape(self, url: str, max_chars: int = SCRAPE_CONTENT_CHARS) -> str:
        """Main-content markdown of one page, truncated; empty on upstream error"""
        async with self._client() as client:
            response = await client.post(
                "/scrape",
                json={"url": url, "formats": ["markdown"], "onlyMainContent": True},
            )
        if response.status_code >= 400:
            logger.warning(f"Firecrawl scrape failed [{response.status_code}] for {url}")
            return ""
        data = response.json()
        markdown = (data.get("data") or {}).get("markdown") or data.get("markdown") or ""
        return markdown[:max_chars]

    async def research(self, topic: str, sources: List[str]) -> str:
        """Search results for the topic plus up to three scraped sources, as markdown"""
        results: List[str] = []
        for item in await self.search(topic, with_content=True):
            text = (item.get("markdown") or item.get("description") or "")[:SEARCH_CONTENT_CHARS]
            results.append(f"## {item.get('title') or item.get('url')}\nSource: {item.get('url')}\n{text}")

        for source in sources[:3]:
            try:
                markdown = await self.scrape(source)
            except httpx.HTTPError as e:
                logger.error(f"Failed to scrape {source}: {e}")
                continue
            if markdown:
                results.append(f"## Source: {source}\n{markdown}")

        return "\n\n---\n\n".join(results) or "No research results found."
