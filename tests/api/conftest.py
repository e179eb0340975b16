"""Fixtures for API tests: real use cases over AsyncMock stores."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from carestock.api.dependencies import (
    get_cat_store,
    get_collect_alerts_use_case,
    get_forecast_stock_use_case,
    get_mov_store,
    get_record_movement_use_case,
    get_stock_report_use_case,
    get_zero_balance_use_case,
)
from carestock.api.main import app
from carestock.application.use_cases import (
    CollectAlertsUseCase,
    ForecastStockUseCase,
    RecordMovementUseCase,
    StockReportUseCase,
    ZeroBalanceUseCase,
)

OVERRIDDEN = (
    get_mov_store,
    get_cat_store,
    get_record_movement_use_case,
    get_zero_balance_use_case,
    get_forecast_stock_use_case,
    get_collect_alerts_use_case,
    get_stock_report_use_case,
)


@pytest.fixture
def mov_store():
    store = AsyncMock()
    store.load_events.return_value = []
    store.list_movements.return_value = []
    store.balance.return_value = 0

    async def _append(event, enforce_available=False):
        return event.model_copy(update={"id": event.id or "generated"})

    store.append.side_effect = _append
    return store


@pytest.fixture
def cat_store(sample_items, sample_subjects):
    store = AsyncMock()
    store.list_items.return_value = sample_items
    store.list_subjects.return_value = sample_subjects
    store.get_item.side_effect = lambda item_id: next((i for i in sample_items if i.id == item_id), None)
    store.get_subject.side_effect = lambda subject_id: next(
        (s for s in sample_subjects if s.id == subject_id), None
    )
    store.upsert_item.side_effect = lambda item: item
    store.upsert_subject.side_effect = lambda subject: subject
    return store


@pytest.fixture
async def client(mov_store, cat_store):
    app.dependency_overrides[get_mov_store] = lambda: mov_store
    app.dependency_overrides[get_cat_store] = lambda: cat_store
    app.dependency_overrides[get_record_movement_use_case] = lambda: RecordMovementUseCase(mov_store)
    app.dependency_overrides[get_zero_balance_use_case] = lambda: ZeroBalanceUseCase(mov_store)
    app.dependency_overrides[get_forecast_stock_use_case] = lambda: ForecastStockUseCase(mov_store, cat_store)
    app.dependency_overrides[get_collect_alerts_use_case] = lambda: CollectAlertsUseCase(mov_store, cat_store)
    app.dependency_overrides[get_stock_report_use_case] = lambda: StockReportUseCase(mov_store, cat_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    for dependency in OVERRIDDEN:
        app.dependency_overrides.pop(dependency, None)
