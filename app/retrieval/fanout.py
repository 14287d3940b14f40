"""All-or-nothing execution of a batch of collection queries."""

import logging

from app.clients.typesense_client import TypesenseClient
from app.models.hits import EngineResult
from app.search.errors import EngineError
from app.search.filters import QuerySpec

logger = logging.getLogger(__name__)


class FanoutExecutor:
    """Runs collection queries as one logical batch.

    Results are aligned with the input specs. If any sub-query fails, the
    whole batch fails and no partial results are returned.
    """

    def __init__(self, engine: TypesenseClient):
        self.engine = engine

    async def execute(self, specs: list[QuerySpec]) -> list[EngineResult]:
        """Execute all specs and join on their completion.

        A single spec goes to the engine's collection search endpoint,
        larger batches go through one multi-search round trip.

        Args:
            specs: Query specs, one per collection

        Returns:
            One EngineResult per spec, in input order

        Raises:
            EngineError: If any sub-query fails
        """
        if not specs:
            return []

        collections = [spec.collection for spec in specs]
        logger.info(f"Fan-out over {collections} for query '{specs[0].q}'")

        try:
            if len(specs) == 1:
                results = [await self.engine.search(specs[0])]
            else:
                results = await self.engine.multi_search(specs)
        except EngineError as e:
            logger.error(
                f"Search fan-out failed on collection '{e.collection}' "
                f"for query '{e.query}': {e}"
            )
            raise
        except Exception as e:
            logger.error(
                f"Search fan-out over {collections} for query '{specs[0].q}' "
                f"failed unexpectedly: {type(e).__name__}: {e}",
                exc_info=True,
            )
            raise EngineError(
                str(e), collection=",".join(collections), query=specs[0].q
            ) from e

        if len(results) != len(specs):
            raise EngineError(
                f"Fan-out returned {len(results)} results for {len(specs)} queries",
                collection=",".join(collections),
                query=specs[0].q,
            )

        logger.info(
            "Fan-out complete: "
            + ", ".join(f"{r.collection}={len(r.hits)}/{r.found}" for r in results)
        )
        return results
