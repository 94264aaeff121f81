"""Store interface and the record rules shared by every backend."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Protocol
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..schemas import UPDATABLE_FIELDS, ProductCreate, ProductRecord
from ..verification import check_invariant

IDENTITY_FIELDS = ("brand", "product_name")


class ProductStore(Protocol):
    def migrate(self) -> None: ...

    def close(self) -> None: ...

    def list(self) -> list[ProductRecord]: ...

    def get(self, product_id: str) -> ProductRecord | None: ...

    def create(self, fields: Mapping[str, Any]) -> ProductRecord: ...

    def update(self, product_id: str, partial: Mapping[str, Any]) -> ProductRecord | None: ...

    def update_with(
        self,
        product_id: str,
        build_partial: Callable[[ProductRecord], Mapping[str, Any]],
    ) -> ProductRecord | None:
        """Build the partial from the current record and merge it in one critical section."""
        ...

    def delete(self, product_id: str) -> bool: ...


class RecordClock:
    """Issues strictly increasing creation timestamps and matching ids."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last: datetime | None = None

    def now(self) -> datetime:
        with self._lock:
            current = datetime.now(timezone.utc)
            if self._last is not None and current <= self._last:
                current = self._last + timedelta(microseconds=1)
            self._last = current
            return current

    @staticmethod
    def new_id(created_at: datetime) -> str:
        return f"prod_{int(created_at.timestamp() * 1000)}_{uuid4().hex[:16]}"


def _format_errors(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"])
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def prepare_new(fields: Mapping[str, Any]) -> ProductCreate:
    """Validate a create payload, raising ``ValidationError`` before anything is stored."""
    for name in IDENTITY_FIELDS:
        value = fields.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"{name} is required")
    stray = sorted(set(fields) - UPDATABLE_FIELDS)
    if stray:
        raise ValidationError(f"Cannot set fields on create: {', '.join(stray)}")
    try:
        candidate = ProductCreate.model_validate(dict(fields))
    except PydanticValidationError as exc:
        raise ValidationError(_format_errors(exc)) from exc
    check_invariant(candidate.verification_required, candidate.fields_to_verify)
    return candidate


def build_record(candidate: ProductCreate, clock: RecordClock) -> ProductRecord:
    created_at = clock.now()
    return ProductRecord(**candidate.model_dump(), id=clock.new_id(created_at), created_at=created_at)


def merge_partial(existing: ProductRecord, partial: Mapping[str, Any]) -> ProductRecord:
    """Overwrite exactly the keys present in ``partial``.

    Presence is the only trigger: ``""``, ``0`` and ``False`` overwrite like any
    other value, and keys the caller did not send keep their stored value.
    """
    blocked = sorted(set(partial) - UPDATABLE_FIELDS)
    if blocked:
        raise ValidationError(f"Cannot update fields: {', '.join(blocked)}")
    merged = existing.model_dump()
    merged.update(partial)
    try:
        record = ProductRecord.model_validate(merged)
    except PydanticValidationError as exc:
        raise ValidationError(_format_errors(exc)) from exc
    check_invariant(record.verification_required, record.fields_to_verify)
    return record
