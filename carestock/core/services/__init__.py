"""
Core business logic services.

Layer-pure services that depend only on:
- carestock/core/entities/*
- carestock/core/interfaces/*
- carestock/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
Every derivation takes an explicit as_of date.
"""

from carestock.core.services.alert_aggregator import BUCKET_ORDER, AlertAggregator, order_alerts
from carestock.core.services.balance_calculator import BalanceCalculator
from carestock.core.services.consumption_estimator import (
    DEFAULT_WINDOW_DAYS,
    ConsumptionEstimator,
)
from carestock.core.services.depletion_forecaster import DepletionForecaster, urgency_sort_key
from carestock.core.services.ledger import (
    Ledger,
    LedgerSnapshot,
    build_movement,
    validate_movement,
)
from carestock.core.services.stock_report import (
    CategoryConsumption,
    InventoryFlowRow,
    PersonalHolding,
    StockReportService,
    StockStatus,
    stock_status,
)

__all__ = [
    # Ledger
    "Ledger",
    "LedgerSnapshot",
    "build_movement",
    "validate_movement",
    # Balances and consumption
    "BalanceCalculator",
    "ConsumptionEstimator",
    "DEFAULT_WINDOW_DAYS",
    # Forecasting
    "DepletionForecaster",
    "urgency_sort_key",
    # Alerts
    "AlertAggregator",
    "BUCKET_ORDER",
    "order_alerts",
    # Reports
    "StockReportService",
    "StockStatus",
    "InventoryFlowRow",
    "PersonalHolding",
    "CategoryConsumption",
    "stock_status",
]
