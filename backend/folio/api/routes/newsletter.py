"""
API routes for newsletter subscribers and campaigns
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from folio.core.auth import require_admin
from folio.core.database import get_db
from folio.core.logging_config import LoggingConfig
from folio.services.newsletter_service import NewsletterService
from folio.services.webhook_dispatcher import (WebhookDispatcher, WebhookEvent,
                                               get_webhook_transport)

router = APIRouter(prefix="/api/newsletter", tags=["newsletter"])
logger = LoggingConfig.get_logger(__name__)


class SubscriberResponse(BaseModel):
    id: UUID
    email: str
    name: Optional[str] = None
    status: str
    subscribed_at: datetime
    unsubscribed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubscribeRequest(BaseModel):
    email: str
    name: Optional[str] = None


class SubscriberStatusUpdate(BaseModel):
    status: str


class CampaignResponse(BaseModel):
    id: UUID
    subject: str
    content: str
    status: str
    scheduled_for: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    recipient_count: int
    open_count: int
    click_count: int
    agent_notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CampaignCreate(BaseModel):
    subject: str = Field(..., min_length=1)
    content: str = ""
    status: Optional[str] = None
    scheduled_for: Optional[datetime] = None
    agent_notes: Optional[str] = None


class CampaignUpdate(BaseModel):
    subject: Optional[str] = None
    content: Optional[str] = None
    status: Optional[str] = None
    scheduled_for: Optional[datetime] = None
    agent_notes: Optional[str] = None


# Subscribers

@router.post("/subscribers", response_model=SubscriberResponse, status_code=status.HTTP_201_CREATED)
async def subscribe(
    request: SubscribeRequest,
    db: Session = Depends(get_db),
    transport=Depends(get_webhook_transport),
):
    """Public sign-up form"""
    subscriber = NewsletterService(db).create_subscriber(request.email, request.name)
    await WebhookDispatcher(db, transport=transport).dispatch(
        WebhookEvent.NEWSLETTER_SUBSCRIBER_ADDED,
        {"email": subscriber.email, "name": subscriber.name},
    )
    return subscriber


@router.get("/subscribers", response_model=List[SubscriberResponse], dependencies=[Depends(require_admin)])
async def list_subscribers(status: Optional[str] = None, db: Session = Depends(get_db)):
    return NewsletterService(db).list_subscribers(status)


@router.patch("/subscribers/{subscriber_id}", response_model=SubscriberResponse,
              dependencies=[Depends(require_admin)])
async def update_subscriber(subscriber_id: UUID, request: SubscriberStatusUpdate, db: Session = Depends(get_db)):
    return NewsletterService(db).update_subscriber_status(subscriber_id, request.status)


@router.delete("/subscribers/{subscriber_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_admin)])
async def delete_subscriber(subscriber_id: UUID, db: Session = Depends(get_db)):
    NewsletterService(db).delete_subscriber(subscriber_id)


# Campaigns

@router.get("/campaigns", response_model=List[CampaignResponse], dependencies=[Depends(require_admin)])
async def list_campaigns(db: Session = Depends(get_db)):
    return NewsletterService(db).list_campaigns()


@router.get("/campaigns/{campaign_id}", response_model=CampaignResponse, dependencies=[Depends(require_admin)])
async def get_campaign(campaign_id: UUID, db: Session = Depends(get_db)):
    return NewsletterService(db).get_campaign(campaign_id)


@router.post("/campaigns", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
async def create_campaign(request: CampaignCreate, db: Session = Depends(get_db)):
    return NewsletterService(db).create_campaign(request.model_dump())


@router.patch("/campaigns/{campaign_id}", response_model=CampaignResponse, dependencies=[Depends(require_admin)])
async def update_campaign(campaign_id: UUID, request: CampaignUpdate, db: Session = Depends(get_db)):
    return NewsletterService(db).update_campaign(campaign_id, request.model_dump(exclude_unset=True))


@router.delete("/campaigns/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_admin)])
async def delete_campaign(campaign_id: UUID, db: Session = Depends(get_db)):
    NewsletterService(db).delete_campaign(campaign_id)
