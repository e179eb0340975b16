"""Application use cases."""

from carestock.application.use_cases.collect_alerts import (
    CollectAlertsResult,
    CollectAlertsUseCase,
)
from carestock.application.use_cases.forecast_stock import (
    ForecastStockResult,
    ForecastStockUseCase,
)
from carestock.application.use_cases.record_movement import (
    RecordMovementResult,
    RecordMovementUseCase,
)
from carestock.application.use_cases.stock_report import StockReportUseCase
from carestock.application.use_cases.zero_balance import ZeroBalanceResult, ZeroBalanceUseCase

__all__ = [
    "RecordMovementUseCase",
    "RecordMovementResult",
    "ZeroBalanceUseCase",
    "ZeroBalanceResult",
    "ForecastStockUseCase",
    "ForecastStockResult",
    "CollectAlertsUseCase",
    "CollectAlertsResult",
    "StockReportUseCase",
]
