"""Tests for the all-or-nothing fan-out executor."""

from unittest.mock import AsyncMock

import pytest

from app.retrieval.fanout import FanoutExecutor
from app.search.collections import COLLECTIONS, MOVIES
from app.search.errors import EngineError
from app.search.filters import QuerySpecBuilder


@pytest.fixture
def specs():
    return QuerySpecBuilder().for_aggregate(list(COLLECTIONS), "matrix", 5)


@pytest.mark.asyncio
async def test_single_spec_uses_collection_search(mock_engine, result_factory):
    spec = QuerySpecBuilder().build(MOVIES, "matrix")
    mock_engine.search.return_value = result_factory("movies", [("1", 9.0, {})])

    results = await FanoutExecutor(mock_engine).execute([spec])

    mock_engine.search.assert_awaited_once_with(spec)
    mock_engine.multi_search.assert_not_called()
    assert results[0].ids == ["1"]


@pytest.mark.asyncio
async def test_batch_results_stay_aligned(mock_engine, result_factory, specs):
    mock_engine.multi_search.return_value = [
        result_factory(spec.collection, [(f"{spec.collection}-1", 1.0, {})]) for spec in specs
    ]

    results = await FanoutExecutor(mock_engine).execute(specs)

    mock_engine.multi_search.assert_awaited_once_with(specs)
    assert [r.collection for r in results] == [s.collection for s in specs]


@pytest.mark.asyncio
async def test_empty_batch_skips_the_engine(mock_engine):
    assert await FanoutExecutor(mock_engine).execute([]) == []
    mock_engine.search.assert_not_called()
    mock_engine.multi_search.assert_not_called()


@pytest.mark.asyncio
async def test_one_failed_sub_query_fails_the_batch(mock_engine, specs):
    """A five-collection batch with one failing query returns nothing."""
    mock_engine.multi_search.side_effect = EngineError(
        "filter_by: could not parse", collection="playlists", query="matrix"
    )

    with pytest.raises(EngineError) as exc_info:
        await FanoutExecutor(mock_engine).execute(specs)

    assert exc_info.value.collection == "playlists"
    assert exc_info.value.query == "matrix"


@pytest.mark.asyncio
async def test_unexpected_errors_become_engine_errors(mock_engine, specs):
    mock_engine.multi_search.side_effect = TimeoutError("read timed out")

    with pytest.raises(EngineError) as exc_info:
        await FanoutExecutor(mock_engine).execute(specs)

    assert "movies" in exc_info.value.collection
    assert isinstance(exc_info.value.__cause__, TimeoutError)


@pytest.mark.asyncio
async def test_misaligned_results_fail_the_batch(mock_engine, result_factory, specs):
    mock_engine.multi_search = AsyncMock(return_value=[result_factory("movies")])

    with pytest.raises(EngineError, match="1 results for 5 queries"):
        await FanoutExecutor(mock_engine).execute(specs)
