"""Pydantic models and engine-side result types for the search service."""

from app.models.error import ErrorResponse
from app.models.hits import BestResultCandidate, EngineResult, Hit
from app.models.search import (
    BestResult,
    BestResultsSearchQuery,
    MovieSearchQuery,
    MultiSearchMode,
    MultiSearchResponse,
    Pagination,
    PersonSearchQuery,
    PlaylistSearchQuery,
    SearchQuery,
    TvSeriesSearchQuery,
    TypeSearchResponse,
    UserSearchQuery,
)

__all__ = [
    # Request models
    "SearchQuery",
    "MovieSearchQuery",
    "TvSeriesSearchQuery",
    "PersonSearchQuery",
    "UserSearchQuery",
    "PlaylistSearchQuery",
    "BestResultsSearchQuery",
    "MultiSearchMode",
    # Response models
    "Pagination",
    "TypeSearchResponse",
    "BestResult",
    "MultiSearchResponse",
    # Engine-side types
    "Hit",
    "EngineResult",
    "BestResultCandidate",
    # Error models
    "ErrorResponse",
]
