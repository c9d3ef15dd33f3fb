"""
CRUD routers for simple ordered site content (nav links, featured items, quick actions, blog categories)
"""
from datetime import datetime
from typing import List, Optional, Type
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, model_validator
from sqlalchemy.orm import Session

from folio.core.auth import require_admin
from folio.core.database import get_db
from folio.core.logging_config import LoggingConfig
from folio.models.blog_post import BlogCategory
from folio.models.site import FeaturedIn, NavLink, QuickAction
from folio.services.blog_service import slugify
from folio.services.entity_service import EntityService

logger = LoggingConfig.get_logger(__name__)


class SwapRequest(BaseModel):
    """Exchange the order_index of two rows"""
    id_a: UUID
    id_b: UUID


class MoveRequest(BaseModel):
    direction: str


class OrderItem(BaseModel):
    id: UUID
    order_index: int


class ReorderRequest(BaseModel):
    items: List[OrderItem]


# Nav links

class NavLinkResponse(BaseModel):
    id: UUID
    label: str
    url: str
    order_index: int
    enabled: bool
    is_external: bool
    created_at: datetime

    class Config:
        from_attributes = True


class NavLinkCreate(BaseModel):
    label: str
    url: str
    enabled: bool = True
    is_external: bool = False
    order_index: Optional[int] = None


class NavLinkUpdate(BaseModel):
    label: Optional[str] = None
    url: Optional[str] = None
    enabled: Optional[bool] = None
    is_external: Optional[bool] = None
    order_index: Optional[int] = None


# Featured in

class FeaturedResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    link: Optional[str] = None
    order_index: int
    enabled: bool
    created_at: datetime

    class Config:
        from_attributes = True


class FeaturedCreate(BaseModel):
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    link: Optional[str] = None
    enabled: bool = True
    order_index: Optional[int] = None


class FeaturedUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    link: Optional[str] = None
    enabled: Optional[bool] = None
    order_index: Optional[int] = None


# Quick actions

class QuickActionResponse(BaseModel):
    id: UUID
    label: str
    message: str
    icon: Optional[str] = None
    order_index: int
    enabled: bool
    created_at: datetime

    class Config:
        from_attributes = True


class QuickActionCreate(BaseModel):
    label: str
    message: str
    icon: Optional[str] = None
    enabled: bool = True
    order_index: Optional[int] = None


class QuickActionUpdate(BaseModel):
    label: Optional[str] = None
    message: Optional[str] = None
    icon: Optional[str] = None
    enabled: Optional[bool] = None
    order_index: Optional[int] = None


# Blog categories

class BlogCategoryResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    description: Optional[str] = None
    order_index: int
    enabled: bool
    created_at: datetime

    class Config:
        from_attributes = True


class BlogCategoryCreate(BaseModel):
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    enabled: bool = True
    order_index: Optional[int] = None

    @model_validator(mode="after")
    def default_slug(self):
        """Slug defaults to the slugified name"""
        self.slug = slugify(self.slug or self.name)
        if not self.slug:
            raise ValueError("name must contain letters or digits")
        return self


class BlogCategoryUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    enabled: Optional[bool] = None
    order_index: Optional[int] = None


def build_ordered_router(
    model,
    prefix: str,
    tag: str,
    response_model: Type[BaseModel],
    create_model: Type[BaseModel],
    update_model: Type[BaseModel],
) -> APIRouter:
    """
    List/create/update/delete plus swap, move and bulk reorder for one model.

    Reads are public (enabled rows only unless include_disabled); writes need the admin key.
    """
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("", response_model=List[response_model])
    async def list_items(include_disabled: bool = False, db: Session = Depends(get_db)):
        return EntityService(db, model).list(enabled_only=not include_disabled)

    @router.get("/{item_id}", response_model=response_model)
    async def get_item(item_id: UUID, db: Session = Depends(get_db)):
        return EntityService(db, model).get_or_raise(item_id)

    @router.post("", response_model=response_model, status_code=status.HTTP_201_CREATED,
                 dependencies=[Depends(require_admin)])
    async def create_item(request: create_model, db: Session = Depends(get_db)):
        return EntityService(db, model).create(request.model_dump())

    @router.patch("/{item_id}", response_model=response_model, dependencies=[Depends(require_admin)])
    async def update_item(item_id: UUID, request: update_model, db: Session = Depends(get_db)):
        return EntityService(db, model).update(item_id, request.model_dump(exclude_unset=True))

    @router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
    async def delete_item(item_id: UUID, db: Session = Depends(get_db)):
        EntityService(db, model).delete(item_id)

    @router.post("/swap", response_model=List[response_model], dependencies=[Depends(require_admin)])
    async def swap_items(request: SwapRequest, db: Session = Depends(get_db)):
        return list(EntityService(db, model).swap(request.id_a, request.id_b))

    @router.post("/{item_id}/move", response_model=List[response_model], dependencies=[Depends(require_admin)])
    async def move_item(item_id: UUID, request: MoveRequest, db: Session = Depends(get_db)):
        return EntityService(db, model).move(item_id, request.direction)

    @router.put("/order", response_model=List[response_model], dependencies=[Depends(require_admin)])
    async def reorder_items(request: ReorderRequest, db: Session = Depends(get_db)):
        return EntityService(db, model).reorder([item.model_dump() for item in request.items])

    return router


nav_links_router = build_ordered_router(
    NavLink, "/api/nav-links", "nav-links", NavLinkResponse, NavLinkCreate, NavLinkUpdate
)
featured_router = build_ordered_router(
    FeaturedIn, "/api/featured", "featured", FeaturedResponse, FeaturedCreate, FeaturedUpdate
)
quick_actions_router = build_ordered_router(
    QuickAction, "/api/quick-actions", "quick-actions", QuickActionResponse, QuickActionCreate, QuickActionUpdate
)
blog_categories_router = build_ordered_router(
    BlogCategory, "/api/blog-categories", "blog-categories",
    BlogCategoryResponse, BlogCategoryCreate, BlogCategoryUpdate,
)
