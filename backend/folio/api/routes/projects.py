"""
API routes for portfolio projects and their images
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from folio.api.routes.content import MoveRequest, ReorderRequest, SwapRequest
from folio.core.auth import require_admin
from folio.core.database import get_db
from folio.core.errors import NotFoundError
from folio.core.logging_config import LoggingConfig
from folio.models.project import Project, ProjectImage
from folio.services.entity_service import EntityService

router = APIRouter(prefix="/api/projects", tags=["projects"])
logger = LoggingConfig.get_logger(__name__)


class ProjectImageResponse(BaseModel):
    id: UUID
    image_url: str
    image_path: Optional[str] = None
    order_index: int

    class Config:
        from_attributes = True


class ProjectResponse(BaseModel):
    """Project response model"""
    id: UUID
    title: str
    description: str
    demo_link: str
    problem_statement: Optional[str] = None
    why_built: Optional[str] = None
    order_index: int
    enabled: bool
    images: List[ProjectImageResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    demo_link: str = "#"
    problem_statement: Optional[str] = None
    why_built: Optional[str] = None
    enabled: bool = True
    order_index: Optional[int] = None
    image_urls: List[str] = Field(default_factory=list, description="Images in display order")


class ProjectUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    demo_link: Optional[str] = None
    problem_statement: Optional[str] = None
    why_built: Optional[str] = None
    enabled: Optional[bool] = None
    order_index: Optional[int] = None


class ProjectImageCreate(BaseModel):
    image_url: str
    image_path: Optional[str] = None


@router.get("", response_model=List[ProjectResponse])
async def list_projects(include_disabled: bool = False, db: Session = Depends(get_db)):
    """Projects in display order, each with its images"""
    return EntityService(db, Project).list(enabled_only=not include_disabled)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: UUID, db: Session = Depends(get_db)):
    return EntityService(db, Project).get_or_raise(project_id)


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
async def create_project(request: ProjectCreate, db: Session = Depends(get_db)):
    """Create a project at the end of the list, with optional images"""
    data = request.model_dump(exclude={"image_urls"})
    project = EntityService(db, Project).create(data)
    if request.image_urls:
        images = EntityService(db, ProjectImage)
        for index, url in enumerate(request.image_urls):
            images.create({"project_id": project.id, "image_url": url, "order_index": index})
        db.refresh(project)
    return project


@router.patch("/{project_id}", response_model=ProjectResponse, dependencies=[Depends(require_admin)])
async def update_project(project_id: UUID, request: ProjectUpdate, db: Session = Depends(get_db)):
    return EntityService(db, Project).update(project_id, request.model_dump(exclude_unset=True))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
async def delete_project(project_id: UUID, db: Session = Depends(get_db)):
    EntityService(db, Project).delete(project_id)


@router.post("/swap", response_model=List[ProjectResponse], dependencies=[Depends(require_admin)])
async def swap_projects(request: SwapRequest, db: Session = Depends(get_db)):
    return list(EntityService(db, Project).swap(request.id_a, request.id_b))


@router.post("/{project_id}/move", response_model=List[ProjectResponse], dependencies=[Depends(require_admin)])
async def move_project(project_id: UUID, request: MoveRequest, db: Session = Depends(get_db)):
    return EntityService(db, Project).move(project_id, request.direction)


@router.put("/order", response_model=List[ProjectResponse], dependencies=[Depends(require_admin)])
async def reorder_projects(request: ReorderRequest, db: Session = Depends(get_db)):
    return EntityService(db, Project).reorder([item.model_dump() for item in request.items])


@router.post("/{project_id}/images", response_model=ProjectImageResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
async def add_project_image(project_id: UUID, request: ProjectImageCreate, db: Session = Depends(get_db)):
    """Append an image after the project's existing images"""
    project = EntityService(db, Project).get_or_raise(project_id)
    return EntityService(db, ProjectImage).create({
        "project_id": project.id,
        "image_url": request.image_url,
        "image_path": request.image_path,
    })


@router.delete("/{project_id}/images/{image_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_admin)])
async def delete_project_image(project_id: UUID, image_id: UUID, db: Session = Depends(get_db)):
    images = EntityService(db, ProjectImage)
    image = images.get_or_raise(image_id)
    if image.project_id != project_id:
        raise NotFoundError(f"Image {image_id} not found on project {project_id}")
    images.delete(image_id)
