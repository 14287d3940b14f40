"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.models.hits import EngineResult, Hit


def make_result(collection: str, hits: list[tuple[str, float, dict]] | None = None, found=None):
    """Build an EngineResult from (id, relevance, fields) triples."""
    hits = hits or []
    return EngineResult(
        collection=collection,
        found=len(hits) if found is None else found,
        hits=[Hit(id=hit_id, relevance=relevance, fields=fields) for hit_id, relevance, fields in hits],
    )


@pytest.fixture
def mock_engine():
    """Engine double with async search endpoints."""
    engine = MagicMock()
    engine.search = AsyncMock()
    engine.multi_search = AsyncMock()
    engine.close = AsyncMock()
    return engine


@pytest.fixture
def mock_store():
    """Store double returning no rows unless configured."""
    store = MagicMock()
    store.fetch_by_ids = AsyncMock(return_value=[])
    store.close = AsyncMock()
    return store


@pytest.fixture
def result_factory():
    """Factory for EngineResult test data."""
    return make_result
