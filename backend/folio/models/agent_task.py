"""
Agent task model: one autopilot run or one ingested signal
"""
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.ext.mutable import MutableDict

from folio.core.database import Base
from folio.models.types import JSONType, utcnow


class AgentTaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    NEEDS_REVIEW = "needs_review"
    FAILED = "failed"


class AgentTask(Base):
    __tablename__ = "agent_tasks"

    id = Column(Uuid, primary_key=True, default=uuid4)
    task_type = Column(String(50), nullable=False, index=True)  # research, blog_draft, signal, ...
    status = Column(String(20), nullable=False, default=AgentTaskStatus.PENDING.value)
    input_data = Column(MutableDict.as_mutable(JSONType), nullable=True)
    output_data = Column(MutableDict.as_mutable(JSONType), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<AgentTask(id={self.id}, task_type={self.task_type}, status={self.status})>"
