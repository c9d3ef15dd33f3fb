"""
Contact form inbox
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from folio.core.errors import NotFoundError, ValidationError
from folio.core.logging_config import LoggingConfig
from folio.models.contact import ContactMessage

logger = LoggingConfig.get_logger(__name__)


class ContactService:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, obj=None):
        try:
            self.db.commit()
            if obj is not None:
                self.db.refresh(obj)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Contact message database error: {e}", exc_info=True)
            raise
        return obj

    def list_messages(self, unread_only: bool = False) -> List[ContactMessage]:
        """Newest first"""
        query = self.db.query(ContactMessage)
        if unread_only:
            query = query.filter(ContactMessage.is_read.is_(False))
        return query.order_by(ContactMessage.created_at.desc()).all()

    def get(self, message_id: UUID) -> ContactMessage:
        message = self.db.query(ContactMessage).filter(ContactMessage.id == message_id).first()
        if message is None:
            raise NotFoundError(f"Contact message {message_id} not found")
        return message

    def create(self, name: str, email: str, message: str, subject: Optional[str] = None) -> ContactMessage:
        name = (name or "").strip()
        email = (email or "").strip()
        message = (message or "").strip()
        if not name:
            raise ValidationError("Name is required")
        if "@" not in email:
            raise ValidationError("A valid email is required")
        if not message:
            raise ValidationError("Message is required")

        contact = ContactMessage(
            name=name,
            email=email,
            subject=(subject or "").strip() or None,
            message=message,
        )
        self.db.add(contact)
        self._commit(contact)
        logger.info("Contact message received", extra={"message_id": str(contact.id)})
        return contact

    def mark_read(self, message_id: UUID, is_read: bool = True) -> ContactMessage:
        contact = self.get(message_id)
        contact.is_read = is_read
        return self._commit(contact)

    def delete(self, message_id: UUID) -> None:
        self.db.delete(self.get(message_id))
        self._commit()
