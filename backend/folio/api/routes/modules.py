"""
API routes for feature module configuration
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from folio.core.auth import require_admin
from folio.core.database import get_db
from folio.core.errors import NotFoundError
from folio.services.module_service import ModuleService

router = APIRouter(prefix="/api/modules", tags=["modules"], dependencies=[Depends(require_admin)])


class ModuleResponse(BaseModel):
    id: UUID
    module_type: str
    module_config: Dict[str, Any]
    enabled: bool
    updated_at: datetime

    class Config:
        from_attributes = True


class ModuleUpdate(BaseModel):
    module_config: Dict[str, Any] = Field(default_factory=dict)
    enabled: Optional[bool] = None
    merge: bool = Field(default=False, description="Merge keys into the stored config instead of replacing it")


@router.get("", response_model=List[ModuleResponse])
async def list_modules(db: Session = Depends(get_db)):
    return ModuleService(db).list_modules()


@router.get("/{module_type}", response_model=ModuleResponse)
async def get_module(module_type: str, db: Session = Depends(get_db)):
    module = ModuleService(db).get_module(module_type)
    if module is None:
        raise NotFoundError(f"Module '{module_type}' not found")
    return module


@router.put("/{module_type}", response_model=ModuleResponse)
async def save_module(module_type: str, request: ModuleUpdate, db: Session = Depends(get_db)):
    service = ModuleService(db)
    if request.merge:
        module = service.merge_config(module_type, request.module_config)
        if request.enabled is not None:
            module = service.upsert(module_type, dict(module.module_config), request.enabled)
        return module
    return service.upsert(module_type, request.module_config, request.enabled)
