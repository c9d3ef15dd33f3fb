"""
Newsletter subscriber and campaign models
"""
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, DateTime, Integer, String, Text, Uuid

from folio.core.database import Base
from folio.models.types import utcnow


class SubscriberStatus(str, Enum):
    ACTIVE = "active"
    UNSUBSCRIBED = "unsubscribed"
    BOUNCED = "bounced"


class CampaignStatus(str, Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"


class NewsletterSubscriber(Base):
    __tablename__ = "newsletter_subscribers"

    id = Column(Uuid, primary_key=True, default=uuid4)
    email = Column(String(320), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=SubscriberStatus.ACTIVE.value)
    subscribed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    unsubscribed_at = Column(DateTime(timezone=True), nullable=True)


class NewsletterCampaign(Base):
    __tablename__ = "newsletter_campaigns"

    id = Column(Uuid, primary_key=True, default=uuid4)
    subject = Column(String(500), nullable=False)
    content = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default=CampaignStatus.DRAFT.value)
    scheduled_for = Column(DateTime(timezone=True), nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    recipient_count = Column(Integer, nullable=False, default=0)
    open_count = Column(Integer, nullable=False, default=0)
    click_count = Column(Integer, nullable=False, default=0)
    agent_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
