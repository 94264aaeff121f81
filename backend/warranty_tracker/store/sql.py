"""Table-backed product store on SQLAlchemy."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import Base, build_engine, build_session_factory
from ..errors import StorageFault
from ..models import Product
from ..schemas import ProductRecord
from .base import RecordClock, build_record, merge_partial, prepare_new

logger = logging.getLogger(__name__)


class SqlProductStore:
    """Persist products in the ``products`` table.

    Each operation runs in its own transaction; updates lock the row so a merge
    is applied whole or not at all.
    """

    def __init__(self, database_url: str) -> None:
        if not database_url:
            raise ValueError("DATABASE_URL is required for the sql store backend")
        self.engine = build_engine(database_url)
        self._session_factory = build_session_factory(self.engine)
        self._lock = threading.Lock()
        self._clock = RecordClock()

    def migrate(self) -> None:
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            logger.exception("Failed to create products table")
            raise StorageFault() from exc

    def close(self) -> None:
        self.engine.dispose()

    def list(self) -> list[ProductRecord]:
        with self._session_scope("list") as session:
            rows = session.scalars(
                select(Product).order_by(Product.created_at.desc(), Product.id.desc())
            ).all()
            return [ProductRecord.model_validate(row) for row in rows]

    def get(self, product_id: str) -> ProductRecord | None:
        with self._session_scope("get") as session:
            row = session.get(Product, product_id)
            if row is None:
                return None
            return ProductRecord.model_validate(row)

    def create(self, fields: Mapping[str, Any]) -> ProductRecord:
        candidate = prepare_new(fields)
        record = build_record(candidate, self._clock)
        with self._lock, self._session_scope("create") as session:
            session.add(Product(**record.model_dump()))
            session.commit()
        logger.info("Created product %s (%s %s)", record.id, record.brand, record.product_name)
        return record

    def update(self, product_id: str, partial: Mapping[str, Any]) -> ProductRecord | None:
        return self.update_with(product_id, lambda _current: partial)

    def update_with(
        self,
        product_id: str,
        build_partial: Callable[[ProductRecord], Mapping[str, Any]],
    ) -> ProductRecord | None:
        with self._lock, self._session_scope("update") as session:
            row = session.scalars(
                select(Product).where(Product.id == product_id).with_for_update()
            ).one_or_none()
            if row is None:
                return None
            current = ProductRecord.model_validate(row)
            partial = build_partial(current)
            merged = merge_partial(current, partial)
            for field in partial:
                setattr(row, field, getattr(merged, field))
            session.commit()
        logger.info("Updated product %s fields=%s", product_id, sorted(partial))
        return merged

    def delete(self, product_id: str) -> bool:
        with self._lock, self._session_scope("delete") as session:
            row = session.get(Product, product_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
        logger.info("Deleted product %s", product_id)
        return True

    @contextmanager
    def _session_scope(self, operation: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Storage fault during %s", operation)
            raise StorageFault() from exc
        finally:
            session.close()
