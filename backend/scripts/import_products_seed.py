"""Load extraction payloads from a JSON file into the product store."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from warranty_tracker.config import get_settings  # noqa: E402
from warranty_tracker.errors import ValidationError  # noqa: E402
from warranty_tracker.logging_config import configure_logging  # noqa: E402
from warranty_tracker.schemas import UPDATABLE_FIELDS  # noqa: E402
from warranty_tracker.store import ProductStore, build_store  # noqa: E402

logger = logging.getLogger("warranty_tracker.scripts.import_seed")


@dataclass
class ImportStats:
    created: int = 0
    skipped: int = 0
    rejected: int = 0


def load_payloads(json_path: Path) -> list[dict[str, Any]]:
    with json_path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    if isinstance(data, dict):
        # extraction agent responses wrap the fields under "result"
        data = data["products"] if "products" in data else [data.get("result", data)]
    return [item.get("result", item) for item in data]


def import_payloads(store: ProductStore, payloads: Iterable[dict[str, Any]]) -> ImportStats:
    stats = ImportStats()
    existing = {product.invoice_id for product in store.list() if product.invoice_id}
    for payload in payloads:
        invoice_id = payload.get("invoice_id")
        if invoice_id and invoice_id in existing:
            stats.skipped += 1
            continue
        fields = {key: value for key, value in payload.items() if key in UPDATABLE_FIELDS}
        fields.setdefault("fields_to_verify", [])
        fields.setdefault("alert_trigger", False)
        try:
            store.create(fields)
        except ValidationError as exc:
            logger.warning("Rejected payload for invoice %s: %s", invoice_id, exc.detail)
            stats.rejected += 1
            continue
        if invoice_id:
            existing.add(invoice_id)
        stats.created += 1
    return stats


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, "text")
    json_path = Path(sys.argv[1]) if len(sys.argv) > 1 else ROOT.parent / "data" / "products_seed.json"
    if not json_path.exists():
        raise SystemExit(f"JSON file not found: {json_path}")

    store = build_store(settings)
    store.migrate()
    try:
        stats = import_payloads(store, load_payloads(json_path))
    finally:
        store.close()
    print(f"Created {stats.created} products, skipped {stats.skipped} duplicates, rejected {stats.rejected}.")


if __name__ == "__main__":
    main()
