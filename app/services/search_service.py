"""Search service orchestrating fan-out, fusion, hydration and assembly."""

import asyncio
import time
from typing import Any

from app.clients.typesense_client import TypesenseClient
from app.config import get_settings
from app.logging_config import get_logger
from app.models.hits import EngineResult
from app.models.search import (
    BestResultsSearchQuery,
    MultiSearchMode,
    MultiSearchResponse,
    SearchQuery,
    TypeSearchResponse,
)
from app.retrieval.fanout import FanoutExecutor
from app.retrieval.ranking import select_best_result
from app.search.collections import CollectionDescriptor
from app.search.errors import StoreError
from app.search.filters import QuerySpecBuilder
from app.security import Actor, store_headers
from app.services.result_assembler import assemble_multi_result, assemble_type_result
from app.storage.hydrator import Hydrator
from app.storage.record_store import RecordStore

logger = get_logger(__name__)


def _secret(value) -> str | None:
    return value.get_secret_value() if value is not None else None


class SearchService:
    """Service handling federated search requests.

    Per request:
    1. Build one query spec per collection
    2. Fan the specs out to the engine as a single batch
    3. Fuse rank-1 hits into a best result (aggregate searches only)
    4. Hydrate every type's hits from the store concurrently
    5. Assemble the response with pagination

    Holds only stateless engine and store clients; all ranking state is
    local to a request.
    """

    def __init__(
        self,
        engine: TypesenseClient | None = None,
        store: RecordStore | None = None,
        fanout: FanoutExecutor | None = None,
        hydrator: Hydrator | None = None,
        builder: QuerySpecBuilder | None = None,
    ):
        """Initialize search service.

        Args:
            engine: Search engine client (creates default if None)
            store: Record store client (creates default if None)
            fanout: Fan-out executor (creates default if None)
            hydrator: Store hydrator (creates default if None)
            builder: Query spec builder (creates default if None)
        """
        self.settings = get_settings()

        self.engine = engine or TypesenseClient(
            base_url=self.settings.typesense_base_url,
            api_key=_secret(self.settings.typesense_api_key),
            timeout=self.settings.typesense_connection_timeout,
        )
        self.store = store or RecordStore(
            rest_url=self.settings.store_rest_url,
            api_key=_secret(self.settings.supabase_anon_key),
            timeout=self.settings.store_timeout,
        )
        self.fanout = fanout or FanoutExecutor(self.engine)
        self.hydrator = hydrator or Hydrator(self.store)
        self.builder = builder or QuerySpecBuilder(self.settings.text_match_buckets)

        logger.info(
            f"SearchService initialized: engine={self.settings.typesense_base_url}, "
            f"store={self.settings.store_rest_url}"
        )

    def _store_headers(self, actor: Actor | None, language: str | None) -> dict[str, str]:
        return store_headers(
            actor,
            service_key=_secret(self.settings.supabase_service_key),
            language=language,
        )

    async def search_collection(
        self,
        request: SearchQuery,
        actor: Actor | None = None,
        language: str | None = None,
    ) -> TypeSearchResponse:
        """Search a single collection and return one page of records.

        Args:
            request: Typed single-collection request
            actor: Verified caller, None for anonymous callers
            language: Preferred language forwarded to the store

        Returns:
            TypeSearchResponse with records in engine rank order

        Raises:
            EngineError: If the engine query fails
            StoreError: If hydration fails
        """
        start_time = time.time()
        descriptor = request.collection
        actor_id = actor.id if actor else None

        logger.info(
            f"Searching {descriptor.name} with {request.describe()}, "
            f"user: {actor_id or 'Guest'}"
        )

        spec = self.builder.for_request(request, actor_id=actor_id)
        [result] = await self.fanout.execute([spec])

        if not result.hits:
            logger.info(f"No {descriptor.name} matched '{request.query}'")
            return assemble_type_result(result, [], request.page, request.per_page)

        hydrated = await self._hydrate(
            descriptor, result, request.query, self._store_headers(actor, language)
        )
        response = assemble_type_result(result, hydrated, request.page, request.per_page)

        logger.info(
            f"{descriptor.name} search completed in {time.time() - start_time:.3f}s: "
            f"{len(response.data)} records, {result.found} total"
        )
        return response

    async def search_all(
        self,
        request: BestResultsSearchQuery,
        actor: Actor | None = None,
        language: str | None = None,
        mode: MultiSearchMode = MultiSearchMode.BEST_RESULTS,
    ) -> MultiSearchResponse:
        """Search every requested type and pick one best result across them.

        Each type contributes its first ``results_per_type`` records; the
        best result is chosen from the types' rank-1 hits and its record is
        taken from that type's hydrated list.

        Raises:
            EngineError: If any collection query fails
            StoreError: If any type's hydration fails
        """
        start_time = time.time()
        descriptors = request.descriptors
        actor_id = actor.id if actor else None

        logger.info(
            f"Performing a {mode.value} search with query: '{request.query}', "
            f"results_per_type={request.results_per_type}, "
            f"types={[d.type_tag for d in descriptors]}, user: {actor_id or 'Guest'}"
        )

        specs = self.builder.for_aggregate(
            descriptors, request.query, request.results_per_type, actor_id=actor_id
        )
        results = await self.fanout.execute(specs)

        candidate = select_best_result(
            [(descriptor, result.top_hit) for descriptor, result in zip(descriptors, results)]
        )

        headers = self._store_headers(actor, language)
        pending = [
            (descriptor, result)
            for descriptor, result in zip(descriptors, results)
            if result.hits
        ]
        tasks = [
            asyncio.create_task(self._hydrate(descriptor, result, request.query, headers))
            for descriptor, result in pending
        ]
        try:
            hydrated_lists = await asyncio.gather(*tasks)
        except Exception:
            # The request has failed; stop the sibling lookups still in flight
            for task in tasks:
                task.cancel()
            raise
        hydrated: dict[str, list[dict[str, Any]]] = {
            descriptor.type_tag: records
            for (descriptor, _), records in zip(pending, hydrated_lists)
        }

        response = assemble_multi_result(
            descriptors, results, hydrated, candidate, request.results_per_type
        )

        logger.info(
            f"{mode.value} search completed in {time.time() - start_time:.3f}s: "
            f"best={response.best_result.type if response.best_result else None}"
        )
        return response

    async def _hydrate(
        self,
        descriptor: CollectionDescriptor,
        result: EngineResult,
        query: str,
        headers: dict[str, str],
    ) -> list[dict[str, Any]]:
        try:
            return await self.hydrator.hydrate(descriptor, result.ids, headers=headers)
        except StoreError as e:
            e.query = query
            logger.error(
                f"Hydration failed for '{descriptor.name}' from table "
                f"'{e.collection}' for query '{query}': {e}"
            )
            raise

    async def close(self) -> None:
        """Close engine and store connection pools."""
        await self.engine.close()
        await self.store.close()
