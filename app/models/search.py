"""Search request and response models."""

import re
from datetime import date
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer, model_validator

from app.search.collections import (
    COLLECTIONS,
    MOVIES,
    PERSONS,
    PLAYLISTS,
    TV_SERIES,
    USERS,
    CollectionDescriptor,
)

# The engine refuses larger pages
MAX_PER_PAGE = 250
MAX_RESULTS_PER_TYPE = 50

# Excluded ids are interpolated into engine filter expressions
ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def split_csv(value: Any) -> Any:
    """Accept "a,b,c" or repeated query parameters; blank input means absent."""
    if value is None:
        return None
    if isinstance(value, str):
        value = [value]
    if isinstance(value, (list, tuple)):
        items = [part.strip() for item in value for part in str(item).split(",")]
        items = [item for item in items if item]
        return items or None
    return value


class MultiSearchMode(str, Enum):
    """Aggregate search flavours served by the same implementation."""

    BEST_RESULTS = "best_results"
    ALL = "all"


class SearchQuery(BaseModel):
    """Fields shared by every single-collection search."""

    collection: ClassVar[CollectionDescriptor]

    query: str = Field(min_length=1, max_length=512, description="Free-text query")
    page: int = Field(default=1, ge=1, description="1-indexed page number")
    per_page: int = Field(default=10, ge=1, le=MAX_PER_PAGE, description="Results per page")
    sort_by: str | None = Field(
        default=None, description="Secondary sort field applied after relevance"
    )

    @field_validator("sort_by")
    @classmethod
    def validate_sort_by(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if v not in cls.collection.sort_fields:
            raise ValueError(
                f"sort_by must be one of {list(cls.collection.sort_fields)}, got '{v}'"
            )
        return v

    @property
    def sort_field(self) -> str:
        return self.sort_by or self.collection.default_sort_field

    def range_filters(self) -> list[tuple[str, Any, Any]]:
        """(field, min, max) triples; either bound may be None."""
        return []

    def membership_filters(self) -> list[tuple[str, list[Any] | None]]:
        return []

    def exclusion_filters(self) -> list[tuple[str, list[Any] | None]]:
        return []

    def describe(self) -> str:
        """Short summary for request logging."""
        return (
            f"query='{self.query}', page={self.page}, per_page={self.per_page}, "
            f"sort_by={self.sort_field}"
        )


def _check_bounds(model: BaseModel, *dimensions: str) -> None:
    for dimension in dimensions:
        minimum = getattr(model, f"{dimension}_min")
        maximum = getattr(model, f"{dimension}_max")
        if minimum is not None and maximum is not None and minimum > maximum:
            raise ValueError(f"{dimension}_min must not exceed {dimension}_max")


class MovieSearchQuery(SearchQuery):
    """Movie search with genre, runtime and release date filters."""

    collection: ClassVar[CollectionDescriptor] = MOVIES

    genre_ids: list[int] | None = Field(default=None, description="Comma-separated genre ids")
    runtime_min: int | None = Field(default=None, ge=0, description="Runtime lower bound (minutes)")
    runtime_max: int | None = Field(default=None, ge=0, description="Runtime upper bound (minutes)")
    release_date_min: date | None = None
    release_date_max: date | None = None

    @field_validator("genre_ids", mode="before")
    @classmethod
    def split_genre_ids(cls, v: Any) -> Any:
        return split_csv(v)

    @model_validator(mode="after")
    def validate_bounds(self) -> "MovieSearchQuery":
        _check_bounds(self, "runtime", "release_date")
        return self

    def range_filters(self) -> list[tuple[str, Any, Any]]:
        return [
            ("runtime", self.runtime_min, self.runtime_max),
            ("release_date", self.release_date_min, self.release_date_max),
        ]

    def membership_filters(self) -> list[tuple[str, list[Any] | None]]:
        return [("genre_ids", self.genre_ids)]


class TvSeriesSearchQuery(SearchQuery):
    """TV series search with genre, season, episode, rating and air date filters."""

    collection: ClassVar[CollectionDescriptor] = TV_SERIES

    genre_ids: list[int] | None = Field(default=None, description="Comma-separated genre ids")
    number_of_seasons_min: int | None = Field(default=None, ge=0)
    number_of_seasons_max: int | None = Field(default=None, ge=0)
    number_of_episodes_min: int | None = Field(default=None, ge=0)
    number_of_episodes_max: int | None = Field(default=None, ge=0)
    vote_average_min: float | None = Field(default=None, ge=0.0, le=10.0)
    vote_average_max: float | None = Field(default=None, ge=0.0, le=10.0)
    first_air_date_min: date | None = None
    first_air_date_max: date | None = None

    @field_validator("genre_ids", mode="before")
    @classmethod
    def split_genre_ids(cls, v: Any) -> Any:
        return split_csv(v)

    @model_validator(mode="after")
    def validate_bounds(self) -> "TvSeriesSearchQuery":
        _check_bounds(
            self, "number_of_seasons", "number_of_episodes", "vote_average", "first_air_date"
        )
        return self

    def range_filters(self) -> list[tuple[str, Any, Any]]:
        return [
            ("number_of_seasons", self.number_of_seasons_min, self.number_of_seasons_max),
            ("number_of_episodes", self.number_of_episodes_min, self.number_of_episodes_max),
            ("vote_average", self.vote_average_min, self.vote_average_max),
            ("first_air_date", self.first_air_date_min, self.first_air_date_max),
        ]

    def membership_filters(self) -> list[tuple[str, list[Any] | None]]:
        return [("genre_ids", self.genre_ids)]


class PersonSearchQuery(SearchQuery):
    collection: ClassVar[CollectionDescriptor] = PERSONS


class UserSearchQuery(SearchQuery):
    """User search, optionally hiding specific users (e.g. the caller)."""

    collection: ClassVar[CollectionDescriptor] = USERS

    exclude_ids: list[str] | None = Field(default=None, description="Comma-separated user ids")

    @field_validator("exclude_ids", mode="before")
    @classmethod
    def split_exclude_ids(cls, v: Any) -> Any:
        return split_csv(v)

    @field_validator("exclude_ids")
    @classmethod
    def validate_exclude_ids(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        invalid = [item for item in v if not ID_PATTERN.fullmatch(item)]
        if invalid:
            raise ValueError(f"exclude_ids may only hold plain ids, got {invalid}")
        return v

    def exclusion_filters(self) -> list[tuple[str, list[Any] | None]]:
        return [("id", self.exclude_ids)]


class PlaylistSearchQuery(SearchQuery):
    collection: ClassVar[CollectionDescriptor] = PLAYLISTS


class BestResultsSearchQuery(BaseModel):
    """Aggregate search across types, previewing each type's first page."""

    query: str = Field(min_length=1, max_length=512, description="Free-text query")
    results_per_type: int = Field(
        default=5, ge=1, le=MAX_RESULTS_PER_TYPE, description="Results returned per type"
    )
    types: list[str] | None = Field(
        default=None, description="Comma-separated type tags to search (default: all)"
    )

    @field_validator("types", mode="before")
    @classmethod
    def split_types(cls, v: Any) -> Any:
        return split_csv(v)

    @field_validator("types")
    @classmethod
    def validate_types(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        known = [descriptor.type_tag for descriptor in COLLECTIONS]
        unknown = [tag for tag in v if tag not in known]
        if unknown:
            raise ValueError(f"Unknown types {unknown}, expected any of {known}")
        return v

    @property
    def descriptors(self) -> list[CollectionDescriptor]:
        """Requested collections, always in tie-break precedence order."""
        if not self.types:
            return list(COLLECTIONS)
        return [descriptor for descriptor in COLLECTIONS if descriptor.type_tag in self.types]


class Pagination(BaseModel):
    """Paging block echoed with every type's results."""

    total_results: int = Field(ge=0, description="Engine-reported match count")
    total_pages: int = Field(ge=0, description="Pages needed at this page size")
    current_page: int = Field(ge=1)
    per_page: int = Field(ge=1)


class TypeSearchResponse(BaseModel):
    """Hydrated records for one type, in engine rank order."""

    data: list[dict[str, Any]] = Field(default_factory=list)
    pagination: Pagination


class BestResult(BaseModel):
    """The single best record across all queried types."""

    type: str
    data: dict[str, Any]


class MultiSearchResponse(BaseModel):
    """Aggregate response: best result plus a block per queried type."""

    model_config = ConfigDict(populate_by_name=True)

    best_result: BestResult | None = Field(default=None, alias="bestResult")
    movies: TypeSearchResponse | None = None
    tv_series: TypeSearchResponse | None = None
    persons: TypeSearchResponse | None = None
    users: TypeSearchResponse | None = None
    playlists: TypeSearchResponse | None = None

    @model_serializer(mode="wrap")
    def drop_unqueried_types(self, handler) -> dict[str, Any]:
        data = handler(self)
        result_keys = {descriptor.result_key for descriptor in COLLECTIONS}
        return {
            key: value
            for key, value in data.items()
            if value is not None or key not in result_keys
        }
