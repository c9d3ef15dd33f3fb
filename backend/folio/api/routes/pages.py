"""
API routes for pages, page blocks and server-side rendering
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from folio.api.routes.content import MoveRequest, ReorderRequest, SwapRequest
from folio.core.auth import require_admin
from folio.core.database import get_db
from folio.core.errors import NotFoundError
from folio.core.logging_config import LoggingConfig
from folio.models.page import Page, PageBlock
from folio.services.entity_service import EntityService
from folio.services.page_builder_chat import PageBuilderChat, parse_block_action
from folio.services.page_renderer import render_block, render_page

router = APIRouter(prefix="/api/pages", tags=["pages"])
logger = LoggingConfig.get_logger(__name__)


class PageResponse(BaseModel):
    id: UUID
    slug: str
    title: str
    description: Optional[str] = None
    enabled: bool
    show_in_nav: bool
    is_main_landing: bool = False
    order_index: int
    created_at: datetime

    class Config:
        from_attributes = True


class PageCreate(BaseModel):
    slug: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    enabled: bool = True
    show_in_nav: bool = False
    is_main_landing: bool = False


class PageUpdate(BaseModel):
    slug: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    enabled: Optional[bool] = None
    show_in_nav: Optional[bool] = None
    is_main_landing: Optional[bool] = None
    order_index: Optional[int] = None


class BlockResponse(BaseModel):
    id: UUID
    page_slug: str
    block_type: str
    block_config: Dict[str, Any]
    order_index: int
    enabled: bool

    class Config:
        from_attributes = True


class BlockCreate(BaseModel):
    block_type: str = Field(..., min_length=1)
    block_config: Dict[str, Any] = Field(default_factory=dict)
    enabled: bool = True
    order_index: Optional[int] = None


class BlockUpdate(BaseModel):
    block_type: Optional[str] = None
    block_config: Optional[Dict[str, Any]] = None
    enabled: Optional[bool] = None
    order_index: Optional[int] = None


class BuilderActionRequest(BaseModel):
    """Either a parsed action or raw assistant text containing a ```json action"""
    action: Optional[Dict[str, Any]] = None
    content: Optional[str] = None


class BlockPreviewRequest(BaseModel):
    block_type: str
    block_config: Dict[str, Any] = Field(default_factory=dict)


# Pages

@router.get("", response_model=List[PageResponse])
async def list_pages(include_disabled: bool = False, db: Session = Depends(get_db)):
    return EntityService(db, Page).list(enabled_only=not include_disabled)


@router.post("", response_model=PageResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
async def create_page(request: PageCreate, db: Session = Depends(get_db)):
    return EntityService(db, Page).create(request.model_dump())


@router.post("/swap", response_model=List[PageResponse], dependencies=[Depends(require_admin)])
async def swap_pages(request: SwapRequest, db: Session = Depends(get_db)):
    return list(EntityService(db, Page).swap(request.id_a, request.id_b))


@router.post("/preview-block", response_class=HTMLResponse, dependencies=[Depends(require_admin)])
async def preview_block(request: BlockPreviewRequest):
    """Render one block config without saving it"""
    return HTMLResponse(render_block(request.block_type, request.block_config))


@router.get("/{slug}", response_model=PageResponse)
async def get_page(slug: str, db: Session = Depends(get_db)):
    page = db.query(Page).filter(Page.slug == slug).first()
    if page is None:
        raise NotFoundError(f"Page '{slug}' not found")
    return page


@router.patch("/id/{page_id}", response_model=PageResponse, dependencies=[Depends(require_admin)])
async def update_page(page_id: UUID, request: PageUpdate, db: Session = Depends(get_db)):
    return EntityService(db, Page).update(page_id, request.model_dump(exclude_unset=True))


@router.delete("/id/{page_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
async def delete_page(page_id: UUID, db: Session = Depends(get_db)):
    EntityService(db, Page).delete(page_id)


@router.get("/{slug}/render", response_class=HTMLResponse)
async def render_page_html(slug: str, db: Session = Depends(get_db)):
    """Server-rendered HTML of the page's enabled blocks"""
    return HTMLResponse(render_page(db, slug))


# Blocks

@router.get("/{slug}/blocks", response_model=List[BlockResponse])
async def list_blocks(slug: str, include_disabled: bool = False, db: Session = Depends(get_db)):
    return EntityService(db, PageBlock).list(enabled_only=not include_disabled, page_slug=slug)


@router.post("/{slug}/blocks", response_model=BlockResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
async def create_block(slug: str, request: BlockCreate, db: Session = Depends(get_db)):
    data = request.model_dump()
    data["page_slug"] = slug
    return EntityService(db, PageBlock).create(data)


@router.patch("/{slug}/blocks/{block_id}", response_model=BlockResponse, dependencies=[Depends(require_admin)])
async def update_block(slug: str, block_id: UUID, request: BlockUpdate, db: Session = Depends(get_db)):
    service = EntityService(db, PageBlock)
    block = service.get_or_raise(block_id)
    if block.page_slug != slug:
        raise NotFoundError(f"Block {block_id} not found on page '{slug}'")
    return service.update(block_id, request.model_dump(exclude_unset=True))


@router.delete("/{slug}/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_admin)])
async def delete_block(slug: str, block_id: UUID, db: Session = Depends(get_db)):
    service = EntityService(db, PageBlock)
    block = service.get_or_raise(block_id)
    if block.page_slug != slug:
        raise NotFoundError(f"Block {block_id} not found on page '{slug}'")
    service.delete(block_id)


@router.post("/{slug}/blocks/{block_id}/move", response_model=List[BlockResponse],
             dependencies=[Depends(require_admin)])
async def move_block(slug: str, block_id: UUID, request: MoveRequest, db: Session = Depends(get_db)):
    """Move a block within its page"""
    return EntityService(db, PageBlock).move(block_id, request.direction, page_slug=slug)


@router.put("/{slug}/blocks/order", response_model=List[BlockResponse], dependencies=[Depends(require_admin)])
async def reorder_blocks(slug: str, request: ReorderRequest, db: Session = Depends(get_db)):
    return EntityService(db, PageBlock).reorder([item.model_dump() for item in request.items])


@router.post("/{slug}/builder-actions", response_model=Optional[BlockResponse],
             dependencies=[Depends(require_admin)])
async def apply_builder_action(slug: str, request: BuilderActionRequest, db: Session = Depends(get_db)):
    """
    Persist a page-builder chat action.

    Suggestions (and text without an action) store nothing and return null.
    """
    action = request.action or parse_block_action(request.content or "")
    if not action:
        return None
    return PageBuilderChat(gateway=None, db=db).apply_action(slug, action)
