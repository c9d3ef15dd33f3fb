"""
Newsletter subscribers, campaigns and delivery through Resend
"""
import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

import httpx
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from folio.core.config import Settings, get_settings
from folio.core.errors import FunctionError, NotFoundError, ValidationError
from folio.core.logging_config import LoggingConfig
from folio.core.metrics import newsletter_emails_total
from folio.models.newsletter import (CampaignStatus, NewsletterCampaign,
                                     NewsletterSubscriber, SubscriberStatus)

logger = LoggingConfig.get_logger(__name__)


class NewsletterService:
    """CRUD for subscribers and campaigns"""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, obj=None):
        try:
            self.db.commit()
            if obj is not None:
                self.db.refresh(obj)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Newsletter database error: {e}", exc_info=True)
            raise
        return obj

    # Subscribers

    def list_subscribers(self, status: Optional[str] = None) -> List[NewsletterSubscriber]:
        query = self.db.query(NewsletterSubscriber)
        if status:
            query = query.filter(NewsletterSubscriber.status == status)
        return query.order_by(NewsletterSubscriber.subscribed_at.desc()).all()

    def create_subscriber(self, email: str, name: Optional[str] = None) -> NewsletterSubscriber:
        email = (email or "").strip().lower()
        if "@" not in email:
            raise ValidationError("A valid email is required")
        if self.db.query(NewsletterSubscriber).filter(NewsletterSubscriber.email == email).first():
            raise ValidationError("This email is already subscribed")
        subscriber = NewsletterSubscriber(email=email, name=name, status=SubscriberStatus.ACTIVE.value)
        self.db.add(subscriber)
        try:
            return self._commit(subscriber)
        except IntegrityError as e:
            raise ValidationError("This email is already subscribed") from e

    def get_subscriber(self, subscriber_id: UUID) -> NewsletterSubscriber:
        subscriber = self.db.query(NewsletterSubscriber).filter(NewsletterSubscriber.id == subscriber_id).first()
        if subscriber is None:
            raise NotFoundError(f"Subscriber {subscriber_id} not found")
        return subscriber

    def update_subscriber_status(self, subscriber_id: UUID, status: str) -> NewsletterSubscriber:
        """Set status; unsubscribing stamps unsubscribed_at"""
        if status not in {s.value for s in SubscriberStatus}:
            raise ValidationError(f"Invalid subscriber status: {status}")
        subscriber = self.get_subscriber(subscriber_id)
        subscriber.status = status
        if status == SubscriberStatus.UNSUBSCRIBED.value:
            subscriber.unsubscribed_at = datetime.now(timezone.utc)
        return self._commit(subscriber)

    def delete_subscriber(self, subscriber_id: UUID) -> None:
        self.db.delete(self.get_subscriber(subscriber_id))
        self._commit()

    # Campaigns

    def list_campaigns(self) -> List[NewsletterCampaign]:
        return self.db.query(NewsletterCampaign).order_by(NewsletterCampaign.created_at.desc()).all()

    def get_campaign(self, campaign_id: UUID) -> NewsletterCampaign:
        campaign = self.db.query(NewsletterCampaign).filter(NewsletterCampaign.id == campaign_id).first()
        if campaign is None:
            raise NotFoundError("Campaign not found")
        return campaign

    def create_campaign(self, data: Dict[str, Any]) -> NewsletterCampaign:
        campaign = NewsletterCampaign(
            subject=data["subject"],
            content=data.get("content") or "",
            status=data.get("status") or CampaignStatus.DRAFT.value,
            scheduled_for=data.get("scheduled_for"),
            agent_notes=data.get("agent_notes"),
        )
        self.db.add(campaign)
        return self._commit(campaign)

    def update_campaign(self, campaign_id: UUID, data: Dict[str, Any]) -> NewsletterCampaign:
        campaign = self.get_campaign(campaign_id)
        for key in ("subject", "content", "status", "scheduled_for", "agent_notes"):
            if key in data and data[key] is not None:
                setattr(campaign, key, data[key])
        return self._commit(campaign)

    def delete_campaign(self, campaign_id: UUID) -> None:
        self.db.delete(self.get_campaign(campaign_id))
        self._commit()


class NewsletterSender:
    """Sends a campaign to every active subscriber in concurrent batches"""

    def __init__(
        self,
        db: Session,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self._transport = transport

    async def _send_one(self, client: httpx.AsyncClient, email: str, campaign: NewsletterCampaign) -> None:
        response = await client.post(
            self.settings.resend_api_url,
            json={
                "from": self.settings.newsletter_from,
                "to": [email],
                "subject": campaign.subject,
                "html": campaign.content,
            },
            headers={"Authorization": f"Bearer {self.settings.resend_api_key}"},
        )
        response.raise_for_status()

    def _set_status(self, campaign: NewsletterCampaign, status: str, **fields) -> None:
        campaign.status = status
        for key, value in fields.items():
            setattr(campaign, key, value)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    async def send(self, campaign_id: Optional[str]) -> Dict[str, Any]:
        """
        Deliver a campaign.

        Returns:
            {success, sent, total}

        Raises:
            FunctionError: missing key/campaign, already sent, no subscribers
        """
        if not self.settings.resend_api_key:
            raise FunctionError("RESEND_API_KEY is not configured", 500, include_success=True)
        if not campaign_id:
            raise FunctionError("Campaign ID is required", 500, include_success=True)
        try:
            campaign_uuid = UUID(str(campaign_id))
        except ValueError:
            raise FunctionError("Campaign not found", 500, include_success=True)

        campaign = self.db.query(NewsletterCampaign).filter(NewsletterCampaign.id == campaign_uuid).first()
        if campaign is None:
            raise FunctionError("Campaign not found", 500, include_success=True)
        if campaign.status == CampaignStatus.SENT.value:
            raise FunctionError("Campaign has already been sent", 500, include_success=True)

        self._set_status(campaign, CampaignStatus.SENDING.value)

        subscribers = (
            self.db.query(NewsletterSubscriber)
            .filter(NewsletterSubscriber.status == SubscriberStatus.ACTIVE.value)
            .all()
        )
        if not subscribers:
            self._set_status(campaign, CampaignStatus.FAILED.value)
            raise FunctionError("No active subscribers found", 500, include_success=True)

        emails = [subscriber.email for subscriber in subscribers]
        batch_size = self.settings.newsletter_batch_size
        sent = 0
        async with httpx.AsyncClient(
            timeout=self.settings.http_timeout_seconds,
            transport=self._transport,
        ) as client:
            for start in range(0, len(emails), batch_size):
                batch = emails[start:start + batch_size]
                results = await asyncio.gather(
                    *(self._send_one(client, email, campaign) for email in batch),
                    return_exceptions=True,
                )
                for email, result in zip(batch, results):
                    if isinstance(result, Exception):
                        newsletter_emails_total.labels(outcome="failed").inc()
                        logger.warning(f"Newsletter delivery failed: {result}", extra={"email": email})
                    else:
                        newsletter_emails_total.labels(outcome="sent").inc()
                        sent += 1

        self._set_status(
            campaign,
            CampaignStatus.SENT.value,
            sent_at=datetime.now(timezone.utc),
            recipient_count=sent,
        )
        logger.info(
            f"Newsletter sent: {sent}/{len(emails)}",
            extra={"campaign_id": str(campaign.id)}
        )
        return {"success": True, "sent": sent, "total": len(emails)}
