"""Response assembly for single-collection and aggregate searches."""

from typing import Any

from app.models.hits import BestResultCandidate, EngineResult
from app.models.search import BestResult, MultiSearchResponse, TypeSearchResponse
from app.search.collections import CollectionDescriptor
from app.services.pagination import build_pagination, empty_pagination


def assemble_type_result(
    result: EngineResult,
    records: list[dict[str, Any]],
    current_page: int,
    per_page: int,
) -> TypeSearchResponse:
    """One type's hydrated records plus its paging block.

    A type without hits reports zero results even if the engine counted
    matches beyond the requested page.
    """
    if not result.hits:
        return TypeSearchResponse(data=[], pagination=empty_pagination(current_page, per_page))
    return TypeSearchResponse(
        data=records,
        pagination=build_pagination(result.found, current_page, per_page),
    )


def find_best_record(
    candidate: BestResultCandidate | None,
    hydrated: dict[str, list[dict[str, Any]]],
) -> BestResult | None:
    """Take the winner's record from its type's already hydrated list.

    Returns None when there is no winner or the store no longer holds it.
    """
    if candidate is None:
        return None
    for record in hydrated.get(candidate.type, []):
        if str(record.get("id")) == candidate.id:
            return BestResult(type=candidate.type, data=record)
    return None


def assemble_multi_result(
    descriptors: list[CollectionDescriptor],
    results: list[EngineResult],
    hydrated: dict[str, list[dict[str, Any]]],
    candidate: BestResultCandidate | None,
    results_per_type: int,
) -> MultiSearchResponse:
    """Aggregate preview: best result plus the first page of every queried type.

    Args:
        descriptors: Queried collections, aligned with ``results``
        results: Engine results per collection
        hydrated: Hydrated records keyed by type tag
        candidate: Winning best result candidate, if any
        results_per_type: Shared page size of every type block
    """
    blocks = {
        descriptor.result_key: assemble_type_result(
            result,
            hydrated.get(descriptor.type_tag, []),
            current_page=1,
            per_page=results_per_type,
        )
        for descriptor, result in zip(descriptors, results)
    }
    return MultiSearchResponse(best_result=find_best_record(candidate, hydrated), **blocks)
