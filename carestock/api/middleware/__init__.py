"""API middleware."""

from carestock.api.middleware.error_handler import ErrorHandlerMiddleware
from carestock.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
