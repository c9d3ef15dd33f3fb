"""
Ordering helpers for reorderable lists (order_index column)
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from folio.core.errors import NotFoundError, ValidationError
from folio.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)


def _order_of(item: Any) -> int:
    if isinstance(item, dict):
        value = item.get("order")
        if value is None:
            value = item.get("order_index")
    else:
        value = getattr(item, "order", None)
        if value is None:
            value = getattr(item, "order_index", None)
    return value if value is not None else 0


def sort_by_order(items: Iterable[Any]) -> List[Any]:
    """Stable sort by `order`, else `order_index`, else 0 (dicts or objects)"""
    return sorted(items, key=_order_of)


# Lists ordered within a parent rather than across the whole table
ORDER_SCOPES = {
    "page_blocks": ("page_slug",),
    "project_images": ("project_id",),
}


def order_scope(model, values: Dict[str, Any]) -> Dict[str, Any]:
    """Scope filter of a row about to be created, e.g. {"page_slug": "home"}"""
    return {column: values.get(column) for column in ORDER_SCOPES.get(model.__tablename__, ())}


def _scoped(query, model, scope: Optional[Dict[str, Any]]):
    for column, value in (scope or {}).items():
        query = query.filter(getattr(model, column) == value)
    return query


def next_order_index(db: Session, model, scope: Optional[Dict[str, Any]] = None) -> int:
    """Max existing order_index + 1 within scope, or 0 for an empty list"""
    current = _scoped(db.query(func.max(model.order_index)), model, scope).scalar()
    return 0 if current is None else current + 1


def _get_or_raise(db: Session, model, item_id: UUID):
    item = db.query(model).filter(model.id == item_id).first()
    if item is None:
        raise NotFoundError(f"{model.__name__} {item_id} not found")
    return item


def swap_order(db: Session, model, id_a: UUID, id_b: UUID) -> Sequence[Any]:
    """
    Swap the order_index of two rows in a single transaction.

    Both updates are committed together; any failure rolls both back.

    Returns:
        The two updated rows (a, b)
    """
    try:
        item_a = _get_or_raise(db, model, id_a)
        item_b = _get_or_raise(db, model, id_b)
        item_a.order_index, item_b.order_index = item_b.order_index, item_a.order_index
        db.commit()
        db.refresh(item_a)
        db.refresh(item_b)
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Swapped {model.__tablename__} order",
        extra={"id_a": str(id_a), "id_b": str(id_b)}
    )
    return item_a, item_b


def move(db: Session, model, item_id: UUID, direction: str, scope: Dict[str, Any] = None) -> List[Any]:
    """
    Move a row one position up or down by swapping with its neighbour.

    scope restricts the neighbourhood (e.g. {"page_slug": "home"}).
    At either end this is a no-op and returns an empty list.
    """
    if direction not in ("up", "down"):
        raise ValidationError("Direction must be 'up' or 'down'")

    items = _scoped(db.query(model), model, scope).order_by(model.order_index, model.id).all()

    index = next((i for i, item in enumerate(items) if item.id == item_id), None)
    if index is None:
        raise NotFoundError(f"{model.__name__} {item_id} not found")

    neighbour = index - 1 if direction == "up" else index + 1
    if neighbour < 0 or neighbour >= len(items):
        return []

    current, other = items[index], items[neighbour]
    if current.order_index == other.order_index:
        # Duplicate indexes: renumber the list by position with the two rows exchanged
        items[index], items[neighbour] = other, current
        try:
            for position, item in enumerate(items):
                item.order_index = position
            db.commit()
        except Exception:
            db.rollback()
            raise
        return [current, other]
    return list(swap_order(db, model, current.id, other.id))


def apply_order(db: Session, model, updates: List[Dict[str, Any]]) -> List[Any]:
    """Bulk reorder: [{id, order_index}] applied in one transaction"""
    rows = []
    try:
        for update in updates:
            item = _get_or_raise(db, model, update["id"])
            item.order_index = int(update["order_index"])
            rows.append(item)
        db.commit()
        for item in rows:
            db.refresh(item)
    except Exception:
        db.rollback()
        raise
    return rows
