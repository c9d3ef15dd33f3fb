"""
Chat transcript storage and the admin session browser
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from folio.core.errors import ValidationError
from folio.core.logging_config import LoggingConfig
from folio.models.chat_history import ChatHistoryMessage, ChatRole

logger = LoggingConfig.get_logger(__name__)

PREVIEW_LENGTH = 100


class ChatHistoryService:
    def __init__(self, db: Session):
        self.db = db

    def save_message(self, session_id: str, role: str, content: str) -> Optional[ChatHistoryMessage]:
        """
        Store one message.

        A storage failure is logged and returns None: the visitor's chat
        must keep working without a transcript.
        """
        if role not in {r.value for r in ChatRole}:
            raise ValidationError(f"Invalid chat role: {role}")
        record = ChatHistoryMessage(session_id=session_id, role=role, content=content)
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Failed to save chat message: {e}", extra={"session_id": session_id})
            return None
        return record

    def session_messages(self, session_id: str) -> List[ChatHistoryMessage]:
        return (
            self.db.query(ChatHistoryMessage)
            .filter(ChatHistoryMessage.session_id == session_id)
            .order_by(ChatHistoryMessage.created_at, ChatHistoryMessage.id)
            .all()
        )

    def list_sessions(self, limit: int = 50, offset: int = 0) -> Dict[str, Any]:
        """
        Sessions with a preview, most recently active first.

        Returns:
            {"sessions": [{session_id, first_message, message_count,
                           started_at, last_message_at}], "total": int}
        """
        last_message_at = func.max(ChatHistoryMessage.created_at)
        rows = (
            self.db.query(
                ChatHistoryMessage.session_id,
                func.count(ChatHistoryMessage.id),
                func.min(ChatHistoryMessage.created_at),
                last_message_at,
            )
            .group_by(ChatHistoryMessage.session_id)
            .order_by(last_message_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        total = self.db.query(func.count(func.distinct(ChatHistoryMessage.session_id))).scalar() or 0

        session_ids = [row[0] for row in rows]
        previews: Dict[str, str] = {}
        if session_ids:
            user_messages = (
                self.db.query(ChatHistoryMessage)
                .filter(
                    ChatHistoryMessage.session_id.in_(session_ids),
                    ChatHistoryMessage.role == ChatRole.USER.value,
                )
                .order_by(ChatHistoryMessage.created_at, ChatHistoryMessage.id)
                .all()
            )
            for message in user_messages:
                previews.setdefault(message.session_id, message.content[:PREVIEW_LENGTH])

        sessions = [
            {
                "session_id": session_id,
                "first_message": previews.get(session_id, "No message"),
                "message_count": count,
                "started_at": started_at,
                "last_message_at": last_at,
            }
            for session_id, count, started_at, last_at in rows
        ]
        return {"sessions": sessions, "total": total}

    def delete_older_than(self, days: int = 90) -> int:
        """Delete messages older than `days`; returns how many were removed"""
        if days < 1:
            raise ValidationError("days must be at least 1")
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        try:
            deleted = (
                self.db.query(ChatHistoryMessage)
                .filter(ChatHistoryMessage.created_at < cutoff)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete old chat messages: {e}", exc_info=True)
            raise
        logger.info(f"Deleted {deleted} chat messages older than {days} days")
        return deleted
