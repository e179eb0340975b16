"""
Domain exceptions for the CareStock ledger.

The core never raises on unknown items or subjects: balances, forecasts and
alerts fall back to zero, UNKNOWN or placeholder labels. The not-found errors
below are raised by the catalog endpoints only.
"""

from typing import Any


class CareStockError(Exception):
    """Base exception for all CareStock errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(CareStockError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InvalidMovementError(ValidationError):
    """Movement event rejected at append time."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(field=field, message=message, value=value)
        self.code = "INVALID_MOVEMENT"


class DuplicateMovementError(InvalidMovementError):
    """Movement event id already present in the ledger."""

    def __init__(self, event_id: str):
        super().__init__(
            field="id",
            message=f"Movement '{event_id}' already recorded",
            value=event_id,
        )
        self.code = "DUPLICATE_MOVEMENT"


# Stock Exceptions
class InsufficientStockError(CareStockError):
    """OUT movement would drive a balance below zero."""

    def __init__(
        self,
        item_id: str,
        requested: int,
        available: int,
        subject_id: str | None = None,
    ):
        pool = f"subject '{subject_id}'" if subject_id else "facility stock"
        super().__init__(
            f"Insufficient stock for '{item_id}' in {pool}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "item_id": item_id,
                "subject_id": subject_id,
                "requested": requested,
                "available": available,
            },
        )


# Storage Exceptions
class StorageError(CareStockError):
    """Base exception for storage operations."""

    pass


class ItemNotFoundError(StorageError):
    """Catalog item not found."""

    def __init__(self, item_id: str):
        super().__init__(
            f"Item not found: {item_id}",
            code="ITEM_NOT_FOUND",
            details={"item_id": item_id},
        )


class SubjectNotFoundError(StorageError):
    """Subject not found in the registry."""

    def __init__(self, subject_id: str):
        super().__init__(
            f"Subject not found: {subject_id}",
            code="SUBJECT_NOT_FOUND",
            details={"subject_id": subject_id},
        )


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(CareStockError):
    """Configuration error."""

    pass
