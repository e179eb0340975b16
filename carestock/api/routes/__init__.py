"""API route modules."""

from carestock.api.routes.alerts import router as alerts_router
from carestock.api.routes.catalog import router as catalog_router
from carestock.api.routes.forecasts import router as forecasts_router
from carestock.api.routes.health import router as health_router
from carestock.api.routes.ledger import router as ledger_router
from carestock.api.routes.reports import router as reports_router

__all__ = [
    "health_router",
    "ledger_router",
    "catalog_router",
    "forecasts_router",
    "alerts_router",
    "reports_router",
]
