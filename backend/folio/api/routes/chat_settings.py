"""
API routes for the chat widget settings (single row)
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from folio.core.auth import require_admin
from folio.core.database import get_db
from folio.core.logging_config import LoggingConfig
from folio.models.site import ChatSettings

router = APIRouter(prefix="/api/chat-settings", tags=["chat-settings"])
logger = LoggingConfig.get_logger(__name__)


class ChatSettingsResponse(BaseModel):
    id: Optional[UUID] = None
    webhook_url: Optional[str] = None
    initial_placeholder: Optional[str] = None
    active_placeholder: Optional[str] = None
    show_quick_actions: bool = True

    class Config:
        from_attributes = True


class ChatSettingsUpdate(BaseModel):
    webhook_url: Optional[str] = None
    initial_placeholder: Optional[str] = None
    active_placeholder: Optional[str] = None
    show_quick_actions: Optional[bool] = None


def get_chat_settings_row(db: Session) -> Optional[ChatSettings]:
    return db.query(ChatSettings).order_by(ChatSettings.updated_at.desc()).first()


@router.get("", response_model=ChatSettingsResponse)
async def get_chat_settings(db: Session = Depends(get_db)):
    """Current settings, or defaults when none are saved"""
    return get_chat_settings_row(db) or ChatSettingsResponse()


@router.put("", response_model=ChatSettingsResponse, dependencies=[Depends(require_admin)])
async def save_chat_settings(request: ChatSettingsUpdate, db: Session = Depends(get_db)):
    row = get_chat_settings_row(db)
    try:
        if row is None:
            row = ChatSettings()
            db.add(row)
        for key, value in request.model_dump(exclude_unset=True).items():
            setattr(row, key, value)
        db.commit()
        db.refresh(row)
    except Exception as e:
        db.rollback()
        logger.error(f"Error saving chat settings: {e}", exc_info=True)
        raise
    return row
