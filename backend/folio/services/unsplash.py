"""
Unsplash photo search proxy
"""
from typing import Any, Dict, Optional

import httpx

from folio.core.config import Settings, get_settings
from folio.core.errors import FunctionError, ValidationError
from folio.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)


def _photo_result(photo: Dict[str, Any], query: str) -> Dict[str, Any]:
    urls = photo.get("urls") or {}
    user = photo.get("user") or {}
    return {
        "id": photo.get("id"),
        "url": urls.get("regular"),
        "thumb": urls.get("small"),
        "alt": photo.get("alt_description") or photo.get("description") or query,
        "author": user.get("name"),
        "authorUrl": (user.get("links") or {}).get("html"),
        "downloadUrl": (photo.get("links") or {}).get("download_location"),
    }


class UnsplashClient:
    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self._transport = transport

    async def search(self, query: Optional[str], page: int = 1, per_page: int = 12) -> Dict[str, Any]:
        """Landscape photo search; returns {results, total}"""
        if not query:
            raise ValidationError("Query is required")
        if not self.settings.unsplash_access_key:
            raise FunctionError("UNSPLASH_ACCESS_KEY is not configured", 500)

        async with httpx.AsyncClient(
            base_url=self.settings.unsplash_api_url,
            timeout=self.settings.http_timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await client.get(
                "/search/photos",
                params={"query": query, "page": page, "per_page": per_page, "orientation": "landscape"},
                headers={"Authorization": f"Client-ID {self.settings.unsplash_access_key}"},
            )
        if response.status_code >= 400:
            logger.error(f"Unsplash API error [{response.status_code}]")
            raise FunctionError(f"Unsplash API error [{response.status_code}]: {response.text}", 500)

        data = response.json()
        return {
            "results": [_photo_result(photo, query) for photo in data.get("results") or []],
            "total": data.get("total", 0),
        }
