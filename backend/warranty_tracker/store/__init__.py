"""Product store backends."""

from ..config import Settings
from .base import ProductStore, RecordClock, merge_partial, prepare_new
from .memory import InMemoryProductStore
from .sql import SqlProductStore

__all__ = [
    "InMemoryProductStore",
    "ProductStore",
    "RecordClock",
    "SqlProductStore",
    "build_store",
    "merge_partial",
    "prepare_new",
]


def build_store(settings: Settings) -> ProductStore:
    if settings.store_backend == "memory":
        return InMemoryProductStore()
    return SqlProductStore(settings.get_database_url())
