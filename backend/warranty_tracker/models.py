"""SQLAlchemy models."""

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Float, Integer, String, Text

from .database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(String(64), primary_key=True)
    brand = Column(String(120), nullable=False)
    product_name = Column(String(255), nullable=False)
    purchase_date = Column(Date, nullable=True)
    invoice_id = Column(String(120), nullable=True, index=True)
    warranty_end_date = Column(Date, nullable=True)
    warranty_period_months = Column(Integer, nullable=True)
    status_color = Column(String(8), nullable=True, index=True)
    status_message = Column(Text, nullable=True)
    days_remaining = Column(Integer, nullable=True)
    overall_confidence = Column(Float, nullable=True)
    verification_required = Column(Boolean, nullable=False, default=False)
    fields_to_verify = Column(JSON, nullable=False, default=list)
    alert_trigger = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Product id={self.id} brand={self.brand!r} status={self.status_color}>"
