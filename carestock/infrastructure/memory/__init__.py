"""In-memory adapters for the synchronous core ports."""

from carestock.infrastructure.memory.catalog import InMemoryCatalog, InMemorySubjectRegistry
from carestock.infrastructure.memory.feeds import (
    StaticExpiringFeed,
    StaticRecurrenceFeed,
    StaticScheduleFeed,
)

__all__ = [
    "InMemoryCatalog",
    "InMemorySubjectRegistry",
    "StaticExpiringFeed",
    "StaticRecurrenceFeed",
    "StaticScheduleFeed",
]
