"""Fixtures for use case tests backed by AsyncMock stores."""

from unittest.mock import AsyncMock

import pytest


@pytest.fixture
def mock_movement_store():
    store = AsyncMock()
    store.load_events.return_value = []
    store.balance.return_value = 0
    return store


@pytest.fixture
def mock_catalog_store(sample_items, sample_subjects):
    store = AsyncMock()
    store.list_items.return_value = sample_items
    store.list_subjects.return_value = sample_subjects
    store.get_subject.side_effect = lambda subject_id: next(
        (s for s in sample_subjects if s.id == subject_id), None
    )
    return store
