"""Catalog endpoints: items and subjects."""

from fastapi import APIRouter, Depends

from carestock.api.dependencies import get_cat_store
from carestock.application.dto.requests import UpsertItemRequest, UpsertSubjectRequest
from carestock.application.dto.responses import (
    ErrorResponse,
    ItemListResponse,
    ItemResponse,
    SubjectListResponse,
    SubjectResponse,
)
from carestock.core.entities.catalog import Item, SubjectInfo
from carestock.core.exceptions import ItemNotFoundError, SubjectNotFoundError
from carestock.infrastructure.storage.sqlite import SQLiteCatalogStore

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


def _item_response(item: Item) -> ItemResponse:
    return ItemResponse(**item.model_dump())


@router.put("/items", response_model=ItemResponse)
async def upsert_item(
    request: UpsertItemRequest,
    store: SQLiteCatalogStore = Depends(get_cat_store),
) -> ItemResponse:
    """Create or update a catalog item."""
    existing = await store.get_item(request.id)
    item = Item(**request.model_dump())
    if existing is not None:
        item = item.model_copy(update={"created_at": existing.created_at})
    saved = await store.upsert_item(item)
    return _item_response(saved)


@router.get("/items", response_model=ItemListResponse)
async def list_items(
    category: str | None = None,
    store: SQLiteCatalogStore = Depends(get_cat_store),
) -> ItemListResponse:
    """List catalog items ordered by name."""
    items = await store.list_items(category=category)
    return ItemListResponse(items=[_item_response(i) for i in items], total=len(items))


@router.get(
    "/items/{item_id}",
    response_model=ItemResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_item(
    item_id: str,
    store: SQLiteCatalogStore = Depends(get_cat_store),
) -> ItemResponse:
    """Get a catalog item."""
    item = await store.get_item(item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    return _item_response(item)


@router.put("/subjects", response_model=SubjectResponse)
async def upsert_subject(
    request: UpsertSubjectRequest,
    store: SQLiteCatalogStore = Depends(get_cat_store),
) -> SubjectResponse:
    """Create or update a subject."""
    saved = await store.upsert_subject(SubjectInfo(**request.model_dump()))
    return SubjectResponse(**saved.model_dump())


@router.get("/subjects", response_model=SubjectListResponse)
async def list_subjects(
    active_only: bool = False,
    store: SQLiteCatalogStore = Depends(get_cat_store),
) -> SubjectListResponse:
    """List subjects ordered by display name."""
    subjects = await store.list_subjects(active_only=active_only)
    return SubjectListResponse(
        subjects=[SubjectResponse(**s.model_dump()) for s in subjects],
        total=len(subjects),
    )


@router.get(
    "/subjects/{subject_id}",
    response_model=SubjectResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_subject(
    subject_id: str,
    store: SQLiteCatalogStore = Depends(get_cat_store),
) -> SubjectResponse:
    """Get a subject."""
    subject = await store.get_subject(subject_id)
    if subject is None:
        raise SubjectNotFoundError(subject_id)
    return SubjectResponse(**subject.model_dump())
