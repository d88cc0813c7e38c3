from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session

from annual_review.db.base import Base
from annual_review.workflow.errors import Conflict, NotFound, StoreUnavailable

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class RecordStore:
    """
    Row-per-entity persistence used by the workflow engine.

    Reads filter by exact match on column values. Writes are flushed
    immediately and only become durable when the surrounding
    `transaction()` block exits cleanly, so a multi-row operation is all or
    nothing from a reader's point of view.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def transaction(self) -> Iterator[RecordStore]:
        try:
            yield self
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info("Store: uniqueness violation %s", exc.orig)
            raise Conflict("A record with the same key already exists") from exc
        except OperationalError as exc:
            self.db.rollback()
            logger.warning("Store: operational error %s", type(exc.orig).__name__)
            raise StoreUnavailable() from exc
        except DBAPIError as exc:
            self.db.rollback()
            logger.warning("Store: driver error %s", type(exc.orig).__name__)
            raise StoreUnavailable() from exc
        except BaseException:
            self.db.rollback()
            raise

    # ---- Reads -------------------------------------------------------------------------

    def find(self, model: type[ModelT], order_by: Any = None, **filters: Any) -> list[ModelT]:
        stmt = select(model).filter_by(**filters)
        stmt = stmt.order_by(order_by if order_by is not None else model.id)
        return list(self._scalars(stmt))

    def find_one(self, model: type[ModelT], **filters: Any) -> ModelT | None:
        stmt = select(model).filter_by(**filters).order_by(model.id).limit(1)
        rows = self._scalars(stmt)
        return rows[0] if rows else None

    def get(self, model: type[ModelT], row_id: int) -> ModelT:
        row = self.find_one(model, id=row_id)
        if row is None:
            raise NotFound(f"{model.__name__} {row_id} not found")
        return row

    # ---- Writes ------------------------------------------------------------------------

    def insert(self, row: ModelT) -> ModelT:
        self.db.add(row)
        self.db.flush()
        return row

    def update(self, model: type[ModelT], row_id: int, patch: dict[str, Any]) -> ModelT:
        row = self.get(model, row_id)
        for key, value in patch.items():
            if not hasattr(model, key):
                raise AttributeError(f"{model.__name__} has no column {key!r}")
            setattr(row, key, value)
        self.db.flush()
        return row

    def delete(self, model: type[ModelT], row_id: int) -> None:
        row = self.get(model, row_id)
        self.db.delete(row)
        self.db.flush()

    # ---- Helpers -----------------------------------------------------------------------

    def _scalars(self, stmt: Any) -> list[Any]:
        try:
            return list(self.db.scalars(stmt).all())
        except OperationalError as exc:
            raise StoreUnavailable() from exc
