"""Status-tier views over the ordered product listing."""

from typing import Dict, List, Optional, Sequence

from .errors import ValidationError
from .schemas import ProductRecord, StatusColor

FILTERS: Dict[str, Optional[StatusColor]] = {
    "all": None,
    "active": StatusColor.GREEN,
    "expiring": StatusColor.YELLOW,
    "expired": StatusColor.RED,
}


def filter_products(products: Sequence[ProductRecord], name: str = "all") -> List[ProductRecord]:
    """Return the products in tier ``name`` keeping the listing order."""
    if name not in FILTERS:
        raise ValidationError(f"Unknown filter {name!r}; expected one of {', '.join(FILTERS)}")
    color = FILTERS[name]
    if color is None:
        return list(products)
    return [product for product in products if product.status_color == color.value]


def partition(products: Sequence[ProductRecord]) -> Dict[str, List[ProductRecord]]:
    return {name: filter_products(products, name) for name in FILTERS}


def tier_counts(products: Sequence[ProductRecord]) -> Dict[str, int]:
    counts = {name: len(items) for name, items in partition(products).items()}
    counts["needs_verification"] = sum(1 for product in products if product.verification_required)
    return counts
