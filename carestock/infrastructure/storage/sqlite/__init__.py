"""SQLite storage implementations."""

from carestock.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore
from carestock.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_snapshot,
    get_transaction,
)
from carestock.infrastructure.storage.sqlite.movement_store import SQLiteMovementStore

# Singleton instances
_movement_store: SQLiteMovementStore | None = None
_catalog_store: SQLiteCatalogStore | None = None


async def get_movement_store() -> SQLiteMovementStore:
    """Get singleton movement store instance."""
    global _movement_store
    if _movement_store is None:
        _movement_store = SQLiteMovementStore()
    return _movement_store


async def get_catalog_store() -> SQLiteCatalogStore:
    """Get singleton catalog store instance."""
    global _catalog_store
    if _catalog_store is None:
        _catalog_store = SQLiteCatalogStore()
    return _catalog_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "get_snapshot",
    # Store classes
    "SQLiteMovementStore",
    "SQLiteCatalogStore",
    # Factory functions
    "get_movement_store",
    "get_catalog_store",
]
