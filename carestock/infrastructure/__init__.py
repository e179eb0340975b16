"""Infrastructure layer implementations."""

from carestock.infrastructure import feeds, memory, storage

__all__ = ["storage", "memory", "feeds"]
