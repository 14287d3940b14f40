"""Hydration of engine hits into full store records."""

import logging
from typing import Any

from app.search.collections import CollectionDescriptor
from app.storage.record_store import RecordStore

logger = logging.getLogger(__name__)


def dedupe(ids: list[str]) -> list[str]:
    """Drop repeated ids, keeping the first occurrence's position."""
    return list(dict.fromkeys(ids))


def reorder(ids: list[str], records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Arrange records in ``ids`` order, dropping ids the store did not return.

    Store ids may be integers while engine ids are strings, so both sides
    are compared as strings.
    """
    by_id = {str(record.get("id")): record for record in records}
    return [by_id[record_id] for record_id in ids if record_id in by_id]


class Hydrator:
    """Resolves ranked ids into full records without disturbing rank order."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def hydrate(
        self,
        descriptor: CollectionDescriptor,
        ids: list[str],
        headers: dict[str, str] | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch full records for ``ids`` in the same order.

        Ids missing from the store are dropped silently. An empty id list
        returns immediately without a store call.

        Raises:
            StoreError: If the store lookup fails
        """
        ids = dedupe(ids)
        if not ids:
            return []

        records = await self.store.fetch_by_ids(
            descriptor.store_table,
            ids,
            select=descriptor.store_select,
            headers=headers,
        )
        hydrated = reorder(ids, records)

        missing = len(ids) - len(hydrated)
        if missing:
            logger.debug(
                f"{missing} of {len(ids)} '{descriptor.name}' hits no longer exist "
                f"in '{descriptor.store_table}'"
            )
        return hydrated
