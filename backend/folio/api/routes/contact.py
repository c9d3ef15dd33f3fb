"""
API routes for the contact form inbox
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from folio.core.auth import require_admin
from folio.core.database import get_db
from folio.core.logging_config import LoggingConfig
from folio.services.contact_service import ContactService
from folio.services.webhook_dispatcher import (WebhookDispatcher, WebhookEvent,
                                               get_webhook_transport)

router = APIRouter(prefix="/api/contact-messages", tags=["contact"])
logger = LoggingConfig.get_logger(__name__)


class ContactMessageResponse(BaseModel):
    id: UUID
    name: str
    email: str
    subject: Optional[str] = None
    message: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ContactMessageCreate(BaseModel):
    name: str
    email: str
    subject: Optional[str] = None
    message: str


class ContactMessageRead(BaseModel):
    is_read: bool = True


@router.post("", response_model=ContactMessageResponse, status_code=status.HTTP_201_CREATED)
async def submit_message(
    request: ContactMessageCreate,
    db: Session = Depends(get_db),
    transport=Depends(get_webhook_transport),
):
    """Public contact form; the message is stored even when the webhook fails"""
    contact = ContactService(db).create(request.name, request.email, request.message, request.subject)
    await WebhookDispatcher(db, transport=transport).dispatch(
        WebhookEvent.CONTACT_MESSAGE_RECEIVED,
        {
            "name": contact.name,
            "email": contact.email,
            "subject": contact.subject,
            "message": contact.message,
        },
    )
    return contact


@router.get("", response_model=List[ContactMessageResponse], dependencies=[Depends(require_admin)])
async def list_messages(unread_only: bool = False, db: Session = Depends(get_db)):
    return ContactService(db).list_messages(unread_only=unread_only)


@router.patch("/{message_id}/read", response_model=ContactMessageResponse, dependencies=[Depends(require_admin)])
async def mark_message_read(message_id: UUID, request: ContactMessageRead, db: Session = Depends(get_db)):
    return ContactService(db).mark_read(message_id, request.is_read)


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
async def delete_message(message_id: UUID, db: Session = Depends(get_db)):
    ContactService(db).delete(message_id)
