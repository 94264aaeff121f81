"""Pytest configuration to ensure local testing defaults."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# During pytest runs we force SQLAlchemy to use a local sqlite database so that tests
# do not require a running PostgreSQL server.
default_sqlite_url = f"sqlite:///{(BACKEND_DIR / 'tests' / 'test_products.db').resolve().as_posix()}"
os.environ.setdefault("DATABASE_URL", default_sqlite_url)

from warranty_tracker.config import Settings  # noqa: E402
from warranty_tracker.main import create_app  # noqa: E402
from warranty_tracker.store import InMemoryProductStore, SqlProductStore  # noqa: E402


def product_payload(**overrides):
    payload = {
        "brand": "Sony",
        "product_name": "WH-1000XM5 Headphones",
        "purchase_date": "2024-03-10",
        "invoice_id": "INV-1001",
        "warranty_end_date": "2026-03-10",
        "warranty_period_months": 24,
        "status_color": "GREEN",
        "status_message": "Warranty active",
        "days_remaining": 420,
        "overall_confidence": 0.97,
        "verification_required": False,
        "fields_to_verify": [],
        "alert_trigger": False,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def payload_factory():
    return product_payload


@pytest.fixture(params=["memory", "sql"])
def store(request, tmp_path):
    if request.param == "memory":
        backend = InMemoryProductStore()
    else:
        backend = SqlProductStore(f"sqlite:///{(tmp_path / 'products.db').as_posix()}")
    backend.migrate()
    yield backend
    backend.close()


@pytest.fixture
def settings():
    return Settings(store_backend="memory", log_format="text", verify_confidence_floor=0.75)


@pytest.fixture
def client(settings, store):
    app = create_app(settings, store)
    return TestClient(app)
