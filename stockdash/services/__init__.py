"""Store implementations for the hosted backend."""

from stockdash.config import settings
from stockdash.services.rest_store import RestStore
from stockdash.services.sql_store import SqlStore
from stockdash.services.store import Store, StoreError, StoreResult

# Singleton instance
_store: Store | None = None


def get_store() -> Store:
    """Get the configured store singleton."""
    global _store
    if _store is None:
        _store = SqlStore() if settings.store_backend == "sql" else RestStore()
    return _store


async def close_store() -> None:
    """Close and forget the store singleton."""
    global _store
    if _store is not None:
        await _store.close()
        _store = None


__all__ = [
    "RestStore",
    "SqlStore",
    "Store",
    "StoreError",
    "StoreResult",
    "close_store",
    "get_store",
]
