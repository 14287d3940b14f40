"""Collection descriptors, query building and search errors."""

from app.search.collections import COLLECTIONS, CollectionDescriptor, get_collection
from app.search.errors import EngineError, SearchError, StoreError
from app.search.filters import QuerySpec, QuerySpecBuilder

__all__ = [
    "COLLECTIONS",
    "CollectionDescriptor",
    "EngineError",
    "QuerySpec",
    "QuerySpecBuilder",
    "SearchError",
    "StoreError",
    "get_collection",
]
