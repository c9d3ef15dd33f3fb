"""
Contact form messages
"""
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, String, Text, Uuid

from folio.core.database import Base
from folio.models.types import utcnow


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False)
    subject = Column(String(500), nullable=True)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<ContactMessage(id={self.id}, email={self.email})>"
