"""
API routes for reviewing agent tasks (autopilot runs and ingested signals)
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from folio.core.auth import require_admin
from folio.core.database import get_db
from folio.core.errors import ValidationError
from folio.models.agent_task import AgentTask, AgentTaskStatus
from folio.services.entity_service import EntityService

router = APIRouter(prefix="/api/agent-tasks", tags=["agent-tasks"], dependencies=[Depends(require_admin)])


class AgentTaskResponse(BaseModel):
    id: UUID
    task_type: str
    status: str
    input_data: Optional[Dict[str, Any]] = None
    output_data: Optional[Dict[str, Any]] = None
    created_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AgentTaskUpdate(BaseModel):
    status: str


@router.get("", response_model=List[AgentTaskResponse])
async def list_tasks(
    task_type: Optional[str] = None,
    task_status: Optional[str] = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Newest first, optionally filtered by type and status"""
    query = db.query(AgentTask)
    if task_type:
        query = query.filter(AgentTask.task_type == task_type)
    if task_status:
        query = query.filter(AgentTask.status == task_status)
    return query.order_by(AgentTask.created_at.desc()).limit(limit).all()


@router.get("/{task_id}", response_model=AgentTaskResponse)
async def get_task(task_id: UUID, db: Session = Depends(get_db)):
    return EntityService(db, AgentTask).get_or_raise(task_id)


@router.patch("/{task_id}", response_model=AgentTaskResponse)
async def update_task(task_id: UUID, request: AgentTaskUpdate, db: Session = Depends(get_db)):
    """Change status, e.g. mark a needs_review draft as completed"""
    if request.status not in {s.value for s in AgentTaskStatus}:
        raise ValidationError(f"Invalid task status: {request.status}")
    return EntityService(db, AgentTask).update(task_id, {"status": request.status})


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: UUID, db: Session = Depends(get_db)):
    EntityService(db, AgentTask).delete(task_id)
