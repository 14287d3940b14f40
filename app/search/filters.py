"""Query specification building for the search engine.

Filter expressions use the engine's grammar:

- ``field: [a..b]`` inclusive range
- ``field: >x`` / ``field: <x`` open bounds
- ``field: [v1,v2]`` set membership
- ``field:!=v`` not equal
- terms joined with ``&&`` and ``||``
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any

from app.search.collections import CollectionDescriptor

AND = " && "


def format_value(value: Any) -> str:
    """Render a filter value.

    Dates are indexed as Unix timestamps, so date bounds are rendered as
    seconds since the epoch at UTC midnight.
    """
    if isinstance(value, datetime):
        return str(int(value.timestamp()))
    if isinstance(value, date):
        return str(int(datetime(value.year, value.month, value.day, tzinfo=UTC).timestamp()))
    return str(value)


def range_term(field: str, minimum: Any = None, maximum: Any = None) -> str | None:
    """Build the term for one numeric dimension.

    Both bounds give an inclusive range, a single bound gives a strict
    comparison, and no bounds give no term at all.
    """
    if minimum is not None and maximum is not None:
        return f"{field}: [{format_value(minimum)}..{format_value(maximum)}]"
    if minimum is not None:
        return f"{field}: >{format_value(minimum)}"
    if maximum is not None:
        return f"{field}: <{format_value(maximum)}"
    return None


def membership_term(field: str, values: Sequence[Any] | None) -> str | None:
    """Match records whose field holds any of the values."""
    if not values:
        return None
    return f"{field}: [{','.join(format_value(v) for v in values)}]"


def exclusion_terms(field: str, values: Sequence[Any] | None) -> list[str]:
    """One not-equal term per excluded value."""
    return [f"{field}:!={format_value(v)}" for v in values or ()]


def combine_and(terms: Iterable[str | None]) -> str | None:
    """AND-join the non-empty terms, or None when nothing is left."""
    active = [term for term in terms if term]
    if not active:
        return None
    return AND.join(active)


def sort_expression(secondary_field: str, buckets: int = 10) -> str:
    """Relevance first, near ties bucketed, then the secondary field."""
    return f"_text_match(buckets: {buckets}):desc,{secondary_field}:desc"


@dataclass(frozen=True)
class QuerySpec:
    """Everything the engine needs to run one collection query."""

    collection: str
    q: str
    query_by: str
    sort_by: str
    page: int = 1
    per_page: int = 10
    filter_by: str | None = None
    include_fields: str | None = None

    def to_params(self) -> dict[str, Any]:
        """Engine search parameters, without the collection name."""
        params: dict[str, Any] = {
            "q": self.q,
            "query_by": self.query_by,
            "sort_by": self.sort_by,
            "page": self.page,
            "per_page": self.per_page,
        }
        if self.filter_by:
            params["filter_by"] = self.filter_by
        if self.include_fields:
            params["include_fields"] = self.include_fields
        return params


class QuerySpecBuilder:
    """Turns typed search requests into per-collection query specs."""

    def __init__(self, text_match_buckets: int = 10):
        self.text_match_buckets = text_match_buckets

    def filter_expression(
        self,
        descriptor: CollectionDescriptor,
        actor_id: str | None = None,
        ranges: Iterable[tuple[str, Any, Any]] = (),
        memberships: Iterable[tuple[str, Sequence[Any] | None]] = (),
        exclusions: Iterable[tuple[str, Sequence[Any] | None]] = (),
    ) -> str | None:
        """Combine the permission filter and request filters with AND.

        Args:
            descriptor: Collection being queried
            actor_id: Authenticated caller id, if any
            ranges: (field, min, max) triples, either bound may be None
            memberships: (field, values) pairs matched by set membership
            exclusions: (field, values) pairs excluded value by value

        Returns:
            Filter expression, or None when no term applies
        """
        terms: list[str | None] = []
        for field, values in memberships:
            terms.append(membership_term(field, values))
        for field, minimum, maximum in ranges:
            terms.append(range_term(field, minimum, maximum))
        for field, values in exclusions:
            terms.extend(exclusion_terms(field, values))

        permission = descriptor.permission_filter(actor_id)
        request_filter = combine_and(terms)
        if permission and request_filter:
            # OR-terms must not bind to the neighbouring AND-terms
            return f"({permission}){AND}{request_filter}"
        return permission or request_filter

    def build(
        self,
        descriptor: CollectionDescriptor,
        query: str,
        page: int = 1,
        per_page: int = 10,
        sort_field: str | None = None,
        filter_by: str | None = None,
    ) -> QuerySpec:
        """Build the spec for one collection.

        Args:
            descriptor: Collection being queried
            query: Free-text query
            page: 1-indexed page
            per_page: Page size
            sort_field: Secondary sort field, defaults to the collection's
                ranking field
            filter_by: Filter expression from ``filter_expression``
        """
        return QuerySpec(
            collection=descriptor.name,
            q=query,
            query_by=descriptor.query_by_param,
            sort_by=sort_expression(
                sort_field or descriptor.ranking_sort_field, self.text_match_buckets
            ),
            page=page,
            per_page=per_page,
            filter_by=filter_by,
            include_fields=descriptor.include_fields,
        )

    def for_request(self, request, actor_id: str | None = None) -> QuerySpec:
        """Build the spec for a single-collection search request."""
        descriptor = request.collection
        return self.build(
            descriptor,
            query=request.query,
            page=request.page,
            per_page=request.per_page,
            sort_field=request.sort_field,
            filter_by=self.filter_expression(
                descriptor,
                actor_id=actor_id,
                ranges=request.range_filters(),
                memberships=request.membership_filters(),
                exclusions=request.exclusion_filters(),
            ),
        )

    def for_aggregate(
        self,
        descriptors: Sequence[CollectionDescriptor],
        query: str,
        results_per_type: int,
        actor_id: str | None = None,
    ) -> list[QuerySpec]:
        """First-page specs for an aggregate search, one per collection."""
        return [
            self.build(
                descriptor,
                query=query,
                page=1,
                per_page=results_per_type,
                sort_field=descriptor.ranking_sort_field,
                filter_by=self.filter_expression(descriptor, actor_id=actor_id),
            )
            for descriptor in descriptors
        ]
