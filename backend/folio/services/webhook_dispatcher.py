"""
Outgoing event webhooks configured in the `webhooks` module

Module config shape:
    {"endpoints": [{"event_type", "source_module", "url", "enabled",
                    "description", "last_triggered", "last_status"}]}
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from folio.core.config import Settings, get_settings
from folio.core.logging_config import LoggingConfig
from folio.core.metrics import webhook_deliveries_total
from folio.services.module_service import ModuleService

logger = LoggingConfig.get_logger(__name__)

WEBHOOKS_MODULE = "webhooks"


class WebhookEvent(str, Enum):
    CONTACT_MESSAGE_RECEIVED = "contact.message_received"
    NEWSLETTER_SUBSCRIBER_ADDED = "newsletter.subscriber_added"
    BLOG_POST_PUBLISHED = "blog.post_published"
    CHAT_SESSION_STARTED = "chat.session_started"


def get_webhook_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for event webhooks; None uses the network (tests override it)"""
    return None


class WebhookDispatcher:
    """
    POSTs {event_type, timestamp, data} to the endpoint registered for an event.

    Delivery never fails the caller: the outcome is returned as a bool and
    written back to the endpoint as last_triggered/last_status.
    """

    def __init__(
        self,
        db: Session,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self._transport = transport
        self._modules = ModuleService(db)

    def find_endpoint(self, event: WebhookEvent) -> Optional[Dict[str, Any]]:
        """First enabled endpoint with a url for the event"""
        endpoints = self._modules.get_config(WEBHOOKS_MODULE).get("endpoints") or []
        for endpoint in endpoints:
            if (
                isinstance(endpoint, dict)
                and endpoint.get("event_type") == event.value
                and endpoint.get("enabled")
                and endpoint.get("url")
            ):
                return endpoint
        return None

    def _record(self, event: WebhookEvent, triggered_at: str, status: str) -> None:
        config = self._modules.get_config(WEBHOOKS_MODULE)
        endpoints = []
        for endpoint in config.get("endpoints") or []:
            if isinstance(endpoint, dict) and endpoint.get("event_type") == event.value:
                endpoint = {**endpoint, "last_triggered": triggered_at, "last_status": status}
            endpoints.append(endpoint)
        try:
            self._modules.merge_config(WEBHOOKS_MODULE, {"endpoints": endpoints})
        except SQLAlchemyError as e:
            logger.warning(f"Could not record webhook status for {event.value}: {e}")

    async def dispatch(self, event: WebhookEvent, data: Dict[str, Any]) -> bool:
        endpoint = self.find_endpoint(event)
        if endpoint is None:
            logger.debug(f"No webhook configured for {event.value}")
            return False

        triggered_at = datetime.now(timezone.utc).isoformat()
        payload = {"event_type": event.value, "timestamp": triggered_at, "data": data}
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.http_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(endpoint["url"], json=payload)
                response.raise_for_status()
            success = True
        except httpx.HTTPError as e:
            logger.warning(
                "Webhook delivery failed",
                extra={"event_type": event.value, "url": endpoint["url"], "error": str(e)},
            )
            success = False

        outcome = "success" if success else "error"
        webhook_deliveries_total.labels(event_type=event.value, outcome=outcome).inc()
        self._record(event, triggered_at, outcome)
        logger.info(f"Webhook {event.value} delivered: {success}")
        return success
