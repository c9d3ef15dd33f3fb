"""
Chat widget API: visitor messages are relayed to the webhook or the AI agent and stored
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from folio.api.routes.chat_settings import get_chat_settings_row
from folio.core.ai_gateway import AIGateway, get_ai_gateway, resolve_chat_provider
from folio.core.auth import require_admin
from folio.core.database import get_db
from folio.core.logging_config import LoggingConfig
from folio.models.chat_history import ChatRole
from folio.models.site import QuickAction
from folio.services.ai_agent import AIAgent
from folio.services.ai_context import build_site_context
from folio.services.chat_history import ChatHistoryService
from folio.services.chat_service import (ChatConversation, ChatMessage,
                                         ChatWidgetService)
from folio.services.entity_service import EntityService
from folio.services.module_service import ModuleService

router = APIRouter(prefix="/api/chat", tags=["chat"])
logger = LoggingConfig.get_logger(__name__)


class HistoryMessage(BaseModel):
    text: str
    isUser: bool
    id: Optional[str] = None


class ChatRequest(BaseModel):
    message: str
    sessionId: Optional[str] = None
    history: List[HistoryMessage] = Field(default_factory=list)


class ChatResponse(BaseModel):
    sessionId: str
    messages: List[Dict[str, Any]]
    error: Optional[str] = None


class ChatSessionSummary(BaseModel):
    session_id: str
    first_message: str
    message_count: int
    started_at: datetime
    last_message_at: datetime


class ChatSessionList(BaseModel):
    sessions: List[ChatSessionSummary]
    total: int


class StoredChatMessage(BaseModel):
    id: UUID
    session_id: str
    role: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


def get_chat_transport():
    """Outbound transport for webhook calls (overridden in tests)"""
    return None


@router.get("/config")
async def get_chat_config(db: Session = Depends(get_db)):
    """Placeholders and quick actions for the widget"""
    settings = get_chat_settings_row(db)
    show_quick_actions = settings.show_quick_actions if settings else True
    quick_actions = EntityService(db, QuickAction).list(enabled_only=True) if show_quick_actions else []
    return {
        "initial_placeholder": settings.initial_placeholder if settings else None,
        "active_placeholder": settings.active_placeholder if settings else None,
        "show_quick_actions": show_quick_actions,
        "quick_actions": [{"id": str(a.id), "label": a.label, "message": a.message, "icon": a.icon} for a in quick_actions],
    }


@router.post("", response_model=ChatResponse)
async def send_message(
    request: ChatRequest,
    db: Session = Depends(get_db),
    gateway: AIGateway = Depends(get_ai_gateway),
    transport=Depends(get_chat_transport),
):
    """
    Send one visitor message.

    Delivery errors do not fail the request: they come back in `error`
    and as a bot message in the transcript.
    """
    conversation = ChatConversation()
    if request.sessionId:
        conversation.session_id = request.sessionId
    conversation.messages = [
        ChatMessage(text=m.text, is_user=m.isUser, **({"id": m.id} if m.id else {}))
        for m in request.history
    ]

    ai_config = ModuleService(db).get_config("ai")
    provider = resolve_chat_provider(ai_config)
    chat_settings = get_chat_settings_row(db)
    webhook_url = provider.webhook_url or (chat_settings.webhook_url if chat_settings else None)

    service = ChatWidgetService(
        webhook_url=webhook_url,
        integration=provider.provider,
        agent=AIAgent(gateway, db=db),
        agent_provider=provider,
        site_context=build_site_context(db),
        system_prompt=ai_config.get("system_prompt") or "",
        transport=transport,
    )
    error = await service.send(conversation, request.message)

    if request.message.strip():
        history = ChatHistoryService(db)
        history.save_message(conversation.session_id, ChatRole.USER.value, request.message)
        if error is None:
            history.save_message(conversation.session_id, ChatRole.ASSISTANT.value, conversation.messages[-1].text)
    return ChatResponse(
        sessionId=conversation.session_id,
        messages=[m.to_dict() for m in conversation.messages],
        error=error,
    )


# Stored transcripts

@router.get("/sessions", response_model=ChatSessionList, dependencies=[Depends(require_admin)])
async def list_chat_sessions(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    return ChatHistoryService(db).list_sessions(limit=limit, offset=offset)


@router.get("/sessions/{session_id}/messages", response_model=List[StoredChatMessage],
            dependencies=[Depends(require_admin)])
async def get_chat_session_messages(session_id: str, db: Session = Depends(get_db)):
    return ChatHistoryService(db).session_messages(session_id)


@router.delete("/history", dependencies=[Depends(require_admin)])
async def delete_old_chat_messages(days: int = Query(default=90, ge=1), db: Session = Depends(get_db)):
    """Purge stored messages older than `days`"""
    return {"deleted": ChatHistoryService(db).delete_older_than(days)}
