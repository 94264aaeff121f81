"""Pydantic schemas for product records and request/response bodies."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StatusColor(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


class ProductFields(BaseModel):
    """Every field of a product except the store-owned ``id`` and ``created_at``."""

    model_config = ConfigDict(use_enum_values=True)

    brand: str = Field(..., max_length=120, description="Manufacturer or brand")
    product_name: str = Field(..., max_length=255)
    purchase_date: Optional[date] = Field(None, description="Invoice purchase date")
    invoice_id: Optional[str] = Field(None, max_length=120)
    warranty_end_date: Optional[date] = None
    warranty_period_months: Optional[int] = Field(None, ge=0)
    status_color: Optional[StatusColor] = Field(None, description="GREEN, YELLOW or RED tier")
    status_message: Optional[str] = None
    days_remaining: Optional[int] = Field(None, description="Negative once the warranty has lapsed")
    overall_confidence: Optional[float] = Field(None, ge=0, le=1)
    verification_required: bool = False
    fields_to_verify: List[str] = Field(default_factory=list)
    alert_trigger: bool = False


class ProductCreate(ProductFields):
    pass


class ProductUpdate(BaseModel):
    """Partial update body; only keys the caller sends are merged."""

    model_config = ConfigDict(use_enum_values=True, extra="forbid")

    brand: Optional[str] = Field(None, max_length=120)
    product_name: Optional[str] = Field(None, max_length=255)
    purchase_date: Optional[date] = None
    invoice_id: Optional[str] = Field(None, max_length=120)
    warranty_end_date: Optional[date] = None
    warranty_period_months: Optional[int] = Field(None, ge=0)
    status_color: Optional[StatusColor] = None
    status_message: Optional[str] = None
    days_remaining: Optional[int] = None
    overall_confidence: Optional[float] = Field(None, ge=0, le=1)
    verification_required: Optional[bool] = None
    fields_to_verify: Optional[List[str]] = None
    alert_trigger: Optional[bool] = None


class ProductRecord(ProductFields):
    """A stored product as returned by every store backend."""

    model_config = ConfigDict(from_attributes=True, frozen=True, use_enum_values=True)

    id: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # sqlite drops tzinfo on the way back out
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


UPDATABLE_FIELDS = frozenset(ProductFields.model_fields)


class ProductEnvelope(BaseModel):
    success: bool = True
    product: ProductRecord


class ProductList(BaseModel):
    success: bool = True
    total: int
    products: List[ProductRecord]


class DeleteResult(BaseModel):
    success: bool = True
    deleted: bool
    message: str


class VerifyRequest(BaseModel):
    corrections: Dict[str, Any] = Field(default_factory=dict, description="Corrected values keyed by field name")
    allow_extra: bool = Field(False, description="Accept corrections for fields that were not flagged")


class ReviewItem(BaseModel):
    product: ProductRecord
    pending_fields: List[str]


class ReviewQueue(BaseModel):
    success: bool = True
    total: int
    confidence_floor: float
    items: List[ReviewItem]


class TierSummary(BaseModel):
    success: bool = True
    all: int
    active: int
    expiring: int
    expired: int
    needs_verification: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: str
