"""
Feature module configuration (ai, api_tokens, autopilot, ...)
"""
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, String, Uuid
from sqlalchemy.ext.mutable import MutableDict

from folio.core.database import Base
from folio.models.types import JSONType, utcnow


class Module(Base):
    __tablename__ = "modules"

    id = Column(Uuid, primary_key=True, default=uuid4)
    module_type = Column(String(100), nullable=False, unique=True, index=True)
    module_config = Column(MutableDict.as_mutable(JSONType), nullable=False, default=dict)
    enabled = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
