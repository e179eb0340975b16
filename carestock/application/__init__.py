"""
Application layer - Use cases and DTOs.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Loading consistent snapshots from storage
3. Running the synchronous core services over them

Use cases are the only entry point for API handlers and the CLI.
"""

from carestock.application.dto import ErrorResponse, HealthResponse
from carestock.application.use_cases import (
    CollectAlertsUseCase,
    ForecastStockUseCase,
    RecordMovementUseCase,
    StockReportUseCase,
    ZeroBalanceUseCase,
)

__all__ = [
    # Response DTOs
    "ErrorResponse",
    "HealthResponse",
    # Use Cases
    "RecordMovementUseCase",
    "ZeroBalanceUseCase",
    "ForecastStockUseCase",
    "CollectAlertsUseCase",
    "StockReportUseCase",
]
