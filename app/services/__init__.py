"""Service layer for search orchestration."""

from app.services.pagination import build_pagination
from app.services.search_service import SearchService

__all__ = [
    "SearchService",
    "build_pagination",
]
