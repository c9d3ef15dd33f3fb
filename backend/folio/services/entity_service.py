"""
Generic CRUD service for simple content tables
"""
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from folio.core.errors import NotFoundError, ValidationError
from folio.core.logging_config import LoggingConfig
from folio.services import ordering

logger = LoggingConfig.get_logger(__name__)

IMMUTABLE_FIELDS = {"id", "created_at", "updated_at"}


class EntityService:
    """
    Fetch/create/update/delete/reorder wrapper around one model.

    Orderable models (with an order_index column) are listed in order and
    get the next free order_index on create.
    """

    def __init__(self, db: Session, model):
        self.db = db
        self.model = model

    @property
    def orderable(self) -> bool:
        return hasattr(self.model, "order_index")

    @property
    def _columns(self) -> set:
        return {column.key for column in self.model.__table__.columns}

    def list(self, enabled_only: bool = False, **filters) -> List[Any]:
        query = self.db.query(self.model)
        if hasattr(self.model, "images"):
            query = query.options(selectinload(self.model.images))
        if enabled_only and hasattr(self.model, "enabled"):
            query = query.filter(self.model.enabled.is_(True))
        for column, value in filters.items():
            if value is not None:
                query = query.filter(getattr(self.model, column) == value)
        if self.orderable:
            query = query.order_by(self.model.order_index)
        elif hasattr(self.model, "created_at"):
            query = query.order_by(self.model.created_at.desc())
        return query.all()

    def get(self, item_id: UUID) -> Optional[Any]:
        return self.db.query(self.model).filter(self.model.id == item_id).first()

    def get_or_raise(self, item_id: UUID) -> Any:
        item = self.get(item_id)
        if item is None:
            raise NotFoundError(f"{self.model.__name__} {item_id} not found")
        return item

    def _clean(self, data: Dict[str, Any]) -> Dict[str, Any]:
        columns = self._columns
        return {
            key: value for key, value in data.items()
            if key in columns and key not in IMMUTABLE_FIELDS
        }

    def create(self, data: Dict[str, Any]) -> Any:
        values = self._clean(data)
        if self.orderable and values.get("order_index") is None:
            values["order_index"] = ordering.next_order_index(
                self.db, self.model, ordering.order_scope(self.model, values)
            )
        try:
            item = self.model(**values)
            self.db.add(item)
            self.db.commit()
            self.db.refresh(item)
            logger.info(
                f"Created {self.model.__tablename__} row",
                extra={"id": str(item.id)}
            )
            return item
        except IntegrityError as e:
            self.db.rollback()
            raise ValidationError(f"{self.model.__name__} conflicts with an existing row") from e
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating {self.model.__tablename__} row: {e}", exc_info=True)
            raise

    def update(self, item_id: UUID, data: Dict[str, Any]) -> Any:
        """Apply known, mutable fields; unknown keys are ignored"""
        item = self.get_or_raise(item_id)
        try:
            for key, value in self._clean(data).items():
                setattr(item, key, value)
            self.db.commit()
            self.db.refresh(item)
            return item
        except IntegrityError as e:
            self.db.rollback()
            raise ValidationError(f"{self.model.__name__} conflicts with an existing row") from e
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating {self.model.__tablename__} {item_id}: {e}", exc_info=True)
            raise

    def delete(self, item_id: UUID) -> None:
        item = self.get_or_raise(item_id)
        try:
            self.db.delete(item)
            self.db.commit()
            logger.info(f"Deleted {self.model.__tablename__} row", extra={"id": str(item_id)})
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting {self.model.__tablename__} {item_id}: {e}", exc_info=True)
            raise

    def swap(self, id_a: UUID, id_b: UUID):
        return ordering.swap_order(self.db, self.model, id_a, id_b)

    def move(self, item_id: UUID, direction: str, **scope) -> List[Any]:
        return ordering.move(self.db, self.model, item_id, direction, scope or None)

    def reorder(self, updates: List[Dict[str, Any]]) -> List[Any]:
        return ordering.apply_order(self.db, self.model, updates)
