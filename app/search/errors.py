"""Exceptions raised by the search pipeline."""


class SearchError(Exception):
    """Raised when a search request cannot be completed.

    Attributes:
        collection: Engine collection or store table that failed
        query: Original query text of the failed request
    """

    def __init__(self, message: str, collection: str | None = None, query: str | None = None):
        super().__init__(message)
        self.collection = collection
        self.query = query


class EngineError(SearchError):
    """Raised when the search engine is unreachable or rejects a query."""

    pass


class StoreError(SearchError):
    """Raised when hydrating records from the store fails."""

    pass
