"""
API routes for visitor analytics
"""
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from folio.core.auth import require_admin
from folio.core.database import get_db
from folio.services.analytics_service import AnalyticsService
from folio.services.webhook_dispatcher import (WebhookDispatcher, WebhookEvent,
                                               get_webhook_transport)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


class PageViewRequest(BaseModel):
    page_slug: str = Field(..., min_length=1)
    visitor_id: Optional[str] = None
    referrer: Optional[str] = None


class ChatSessionStart(BaseModel):
    visitor_id: Optional[str] = None


class ChatSessionUpdate(BaseModel):
    message_count: int = Field(..., ge=0)


class ChatSessionResponse(BaseModel):
    id: UUID
    visitor_id: Optional[str] = None
    message_count: int
    session_start: datetime
    session_end: Optional[datetime] = None

    class Config:
        from_attributes = True


@router.post("/page-views", status_code=status.HTTP_201_CREATED)
async def track_page_view(body: PageViewRequest, request: Request, db: Session = Depends(get_db)):
    view = AnalyticsService(db).track_page_view(
        page_slug=body.page_slug,
        visitor_id=body.visitor_id,
        user_agent=request.headers.get("user-agent"),
        referrer=body.referrer,
    )
    return {"id": str(view.id)}


@router.post("/chat-sessions", response_model=ChatSessionResponse, status_code=status.HTTP_201_CREATED)
async def start_chat_session(
    body: ChatSessionStart,
    db: Session = Depends(get_db),
    transport=Depends(get_webhook_transport),
):
    session = AnalyticsService(db).start_chat_session(body.visitor_id)
    await WebhookDispatcher(db, transport=transport).dispatch(
        WebhookEvent.CHAT_SESSION_STARTED,
        {"session_id": str(session.id), "visitor_id": session.visitor_id},
    )
    return session


@router.patch("/chat-sessions/{session_id}", response_model=ChatSessionResponse)
async def update_chat_session(session_id: UUID, body: ChatSessionUpdate, db: Session = Depends(get_db)):
    return AnalyticsService(db).update_chat_session(session_id, body.message_count)


@router.get("/summary", dependencies=[Depends(require_admin)])
async def analytics_summary(days: int = Query(default=30, ge=1, le=365), db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Dashboard totals, top pages/projects and daily views"""
    return AnalyticsService(db).summary(days)
