"""Data transfer objects for API contracts."""

from carestock.application.dto.requests import (
    CollectAlertsRequest,
    RecordMovementRequest,
    UpsertItemRequest,
    UpsertSubjectRequest,
    ZeroBalanceRequest,
)
from carestock.application.dto.responses import (
    AlertListResponse,
    AlertResponse,
    BalanceResponse,
    CategoryConsumptionResponse,
    ConsumptionReportResponse,
    ErrorResponse,
    ForecastListResponse,
    ForecastResponse,
    HealthResponse,
    InventoryFlowResponse,
    InventoryFlowRowResponse,
    ItemListResponse,
    ItemResponse,
    MovementListResponse,
    MovementResponse,
    PaginatedResponse,
    PersonalHoldingResponse,
    PersonalInventoryResponse,
    ProviderHealthResponse,
    RecordMovementResponse,
    SubjectListResponse,
    SubjectResponse,
    ZeroBalanceResponse,
)

__all__ = [
    # Requests
    "RecordMovementRequest",
    "ZeroBalanceRequest",
    "UpsertItemRequest",
    "UpsertSubjectRequest",
    "CollectAlertsRequest",
    # Responses
    "AlertListResponse",
    "AlertResponse",
    "BalanceResponse",
    "CategoryConsumptionResponse",
    "ConsumptionReportResponse",
    "ErrorResponse",
    "ForecastListResponse",
    "ForecastResponse",
    "HealthResponse",
    "InventoryFlowResponse",
    "InventoryFlowRowResponse",
    "ItemListResponse",
    "ItemResponse",
    "MovementListResponse",
    "MovementResponse",
    "PaginatedResponse",
    "PersonalHoldingResponse",
    "PersonalInventoryResponse",
    "ProviderHealthResponse",
    "RecordMovementResponse",
    "SubjectListResponse",
    "SubjectResponse",
    "ZeroBalanceResponse",
]
