"""Pagination block calculation."""

import math

from app.models.search import Pagination


def build_pagination(total_results: int, current_page: int, per_page: int) -> Pagination:
    """Derive the paging block for one type.

    ``total_results`` is the engine's match count, not the number of
    records that survived hydration. Page and size are echoed as given.
    """
    total_pages = math.ceil(total_results / per_page) if total_results > 0 else 0
    return Pagination(
        total_results=total_results,
        total_pages=total_pages,
        current_page=current_page,
        per_page=per_page,
    )


def empty_pagination(current_page: int, per_page: int) -> Pagination:
    return build_pagination(0, current_page, per_page)
