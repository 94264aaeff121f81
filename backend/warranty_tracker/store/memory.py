"""In-process product store for development and tests."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Mapping

from ..schemas import ProductRecord
from .base import RecordClock, build_record, merge_partial, prepare_new

logger = logging.getLogger(__name__)


class InMemoryProductStore:
    """Keyed map guarded by a single lock, so merges and deletes never interleave."""

    def __init__(self) -> None:
        self._products: dict[str, ProductRecord] = {}
        self._issued: set[str] = set()
        self._lock = threading.Lock()
        self._clock = RecordClock()

    def migrate(self) -> None:
        return None

    def close(self) -> None:
        return None

    def list(self) -> list[ProductRecord]:
        with self._lock:
            products = [product.model_copy(deep=True) for product in self._products.values()]
        return sorted(products, key=lambda product: product.created_at, reverse=True)

    def get(self, product_id: str) -> ProductRecord | None:
        with self._lock:
            product = self._products.get(product_id)
            return product.model_copy(deep=True) if product is not None else None

    def create(self, fields: Mapping[str, Any]) -> ProductRecord:
        candidate = prepare_new(fields)
        with self._lock:
            record = build_record(candidate, self._clock)
            # ids are never handed out twice, even after the record is deleted
            while record.id in self._issued:
                record = record.model_copy(update={"id": self._clock.new_id(record.created_at)})
            self._issued.add(record.id)
            self._products[record.id] = record
        logger.info("Created product %s (%s %s)", record.id, record.brand, record.product_name)
        return record.model_copy(deep=True)

    def update(self, product_id: str, partial: Mapping[str, Any]) -> ProductRecord | None:
        return self.update_with(product_id, lambda _current: partial)

    def update_with(
        self,
        product_id: str,
        build_partial: Callable[[ProductRecord], Mapping[str, Any]],
    ) -> ProductRecord | None:
        with self._lock:
            existing = self._products.get(product_id)
            if existing is None:
                return None
            partial = build_partial(existing.model_copy(deep=True))
            merged = merge_partial(existing, partial)
            self._products[product_id] = merged
        logger.info("Updated product %s fields=%s", product_id, sorted(partial))
        return merged.model_copy(deep=True)

    def delete(self, product_id: str) -> bool:
        with self._lock:
            removed = self._products.pop(product_id, None) is not None
        if removed:
            logger.info("Deleted product %s", product_id)
        return removed
