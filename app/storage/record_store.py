"""Async client for the authoritative record store (Supabase REST)."""

import logging
from typing import Any

import httpx

from app.search.errors import StoreError

logger = logging.getLogger(__name__)


class RecordStore:
    """Primary-key lookups against the store's PostgREST interface.

    Only ``id IN (...)`` lookups are supported. Rows come back in no
    particular order; callers that care about order must reorder them.
    """

    def __init__(
        self,
        rest_url: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the store client.

        Args:
            rest_url: REST base URL, e.g. ``https://xyz.supabase.co/rest/v1``
            api_key: Default key sent as both ``apikey`` and bearer token
            timeout: Request timeout in seconds
            transport: Optional transport override (used in tests)
        """
        headers = {"apikey": api_key, "Authorization": f"Bearer {api_key}"} if api_key else {}
        self.rest_url = rest_url
        self.client = httpx.AsyncClient(
            base_url=rest_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        logger.info(f"Initialized RecordStore for '{rest_url}'")

    async def fetch_by_ids(
        self,
        table: str,
        ids: list[str],
        select: str = "*",
        headers: dict[str, str] | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch the rows of ``table`` whose id is in ``ids``.

        Args:
            table: Table name
            ids: Primary keys to fetch
            select: Column projection, may embed related tables
            headers: Extra headers for this call (caller credentials, language)

        Returns:
            Matching rows in store order

        Raises:
            StoreError: If the lookup fails
        """
        if not ids:
            return []

        params = {"select": select, "id": f"in.({','.join(ids)})"}
        try:
            response = await self.client.get(f"/{table}", params=params, headers=headers)
            response.raise_for_status()
            rows = response.json()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"Failed to hydrate from {table}: {e.response.status_code} {e.response.text}",
                collection=table,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(
                f"Failed to hydrate from {table}: {type(e).__name__}: {e}",
                collection=table,
            ) from e

        if not isinstance(rows, list):
            raise StoreError(
                f"Failed to hydrate from {table}: expected a list of rows",
                collection=table,
            )
        return rows

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self.client.aclose()
