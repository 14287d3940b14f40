"""Async client for the Typesense search engine REST API."""

import logging
from typing import Any

import httpx

from app.models.hits import EngineResult, Hit
from app.search.errors import EngineError
from app.search.filters import QuerySpec

logger = logging.getLogger(__name__)


def parse_result(collection: str, payload: dict[str, Any]) -> EngineResult:
    """Convert one raw engine result into an EngineResult.

    Args:
        collection: Collection the result belongs to
        payload: Raw JSON result (``found`` plus ``hits``)

    Returns:
        EngineResult with hits in engine rank order
    """
    hits = []
    for raw_hit in payload.get("hits") or []:
        document = dict(raw_hit.get("document") or {})
        hit_id = document.pop("id", None)
        if hit_id is None:
            continue
        hits.append(
            Hit(
                id=str(hit_id),
                relevance=float(raw_hit.get("text_match") or 0),
                fields=document,
            )
        )
    return EngineResult(collection=collection, found=int(payload.get("found") or 0), hits=hits)


class TypesenseClient:
    """Client for the Typesense REST API.

    Holds one pooled ``httpx.AsyncClient`` for the process lifetime. The
    client keeps no per-request state and is safe for concurrent use.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the engine client.

        Args:
            base_url: Engine URL, e.g. ``https://search.example.com:443``
            api_key: Engine API key
            timeout: Per-request timeout in seconds (connect, read, write and pool)
            transport: Optional transport override (used in tests)
        """
        headers = {"X-TYPESENSE-API-KEY": api_key} if api_key else {}
        self.base_url = base_url
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        logger.info(f"Initialized TypesenseClient for '{base_url}'")

    async def search(self, spec: QuerySpec) -> EngineResult:
        """Run a single collection query.

        Raises:
            EngineError: If the engine is unreachable or rejects the query
        """
        try:
            response = await self.client.get(
                f"/collections/{spec.collection}/documents/search",
                params=spec.to_params(),
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise EngineError(
                f"Engine rejected search on '{spec.collection}': "
                f"{e.response.status_code} {e.response.text}",
                collection=spec.collection,
                query=spec.q,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise EngineError(
                f"Engine search on '{spec.collection}' failed: {type(e).__name__}: {e}",
                collection=spec.collection,
                query=spec.q,
            ) from e

        return parse_result(spec.collection, payload)

    async def multi_search(self, specs: list[QuerySpec]) -> list[EngineResult]:
        """Run several collection queries in one round trip.

        The engine reports per-search failures inside an otherwise successful
        response, so every entry is checked and the first failed entry fails
        the whole batch.

        Returns:
            Results index-aligned with ``specs``

        Raises:
            EngineError: If the request fails or any single search failed
        """
        if not specs:
            return []

        body = {
            "searches": [
                {"collection": spec.collection, **spec.to_params()} for spec in specs
            ]
        }
        collections = ",".join(spec.collection for spec in specs)
        try:
            response = await self.client.post("/multi_search", json=body)
            response.raise_for_status()
            results = response.json().get("results") or []
        except httpx.HTTPStatusError as e:
            raise EngineError(
                f"Engine rejected multi search over [{collections}]: "
                f"{e.response.status_code} {e.response.text}",
                collection=collections,
                query=specs[0].q,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise EngineError(
                f"Engine multi search over [{collections}] failed: {type(e).__name__}: {e}",
                collection=collections,
                query=specs[0].q,
            ) from e

        if len(results) != len(specs):
            raise EngineError(
                f"Engine returned {len(results)} results for {len(specs)} searches",
                collection=collections,
                query=specs[0].q,
            )

        parsed = []
        for spec, payload in zip(specs, results):
            if "error" in payload:
                raise EngineError(
                    f"Engine rejected search on '{spec.collection}': "
                    f"{payload.get('code')} {payload['error']}",
                    collection=spec.collection,
                    query=spec.q,
                )
            parsed.append(parse_result(spec.collection, payload))
        return parsed

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self.client.aclose()
