"""Storage infrastructure implementations."""

from carestock.infrastructure.storage.sqlite import (
    SQLiteCatalogStore,
    SQLiteMovementStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteMovementStore",
    "SQLiteCatalogStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
