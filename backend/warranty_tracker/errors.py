"""Typed outcomes raised by the product store."""


class StoreError(Exception):
    """Base class for store failures; ``category`` is safe to show callers."""

    category = "store_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(StoreError):
    category = "not_found"

    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} does not exist")
        self.product_id = product_id


class ValidationError(StoreError):
    category = "validation_error"


class StorageFault(StoreError):
    """The backing medium failed; ``detail`` never carries driver output."""

    category = "storage_fault"

    def __init__(self, detail: str = "Storage backend unavailable"):
        super().__init__(detail)
