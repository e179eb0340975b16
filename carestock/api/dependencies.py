"""
Dependency injection container for FastAPI.

Provides store and use case instances to route handlers.
"""

from functools import lru_cache

from carestock.application.use_cases import (
    CollectAlertsUseCase,
    ForecastStockUseCase,
    RecordMovementUseCase,
    StockReportUseCase,
    ZeroBalanceUseCase,
)
from carestock.config import Settings, get_settings
from carestock.infrastructure.storage.sqlite import (
    SQLiteCatalogStore,
    SQLiteMovementStore,
    get_catalog_store,
    get_movement_store,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Store dependencies
async def get_mov_store() -> SQLiteMovementStore:
    """Get movement store."""
    return await get_movement_store()


async def get_cat_store() -> SQLiteCatalogStore:
    """Get catalog store."""
    return await get_catalog_store()


# Use case dependencies
def get_record_movement_use_case() -> RecordMovementUseCase:
    """Get record movement use case."""
    return RecordMovementUseCase()


def get_zero_balance_use_case() -> ZeroBalanceUseCase:
    """Get zero balance use case."""
    return ZeroBalanceUseCase()


def get_forecast_stock_use_case() -> ForecastStockUseCase:
    """Get forecast use case."""
    return ForecastStockUseCase(settings=get_app_settings())


def get_collect_alerts_use_case() -> CollectAlertsUseCase:
    """Get collect alerts use case."""
    return CollectAlertsUseCase(settings=get_app_settings())


def get_stock_report_use_case() -> StockReportUseCase:
    """Get stock report use case."""
    return StockReportUseCase(settings=get_app_settings())
