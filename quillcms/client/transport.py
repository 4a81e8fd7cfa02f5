"""
GraphQL-over-HTTP client with watched (live) queries.

``GraphQLClient.watch`` returns a ``WatchedQuery``; every subscriber of a
watched query receives its result and is notified again whenever the query
is refetched.  ``mutate`` accepts the documents of the queries a write
invalidates and refetches every watched query using one of them once the
write has succeeded.
"""
import asyncio
import logging
from typing import Any, Iterable

import httpx

from quillcms.errors import ERRORS_BY_CODE, CMSError

logger = logging.getLogger(__name__)


class GraphQLClientError(CMSError):
    """A GraphQL or transport failure without a known error code."""

    code = "GRAPHQL_ERROR"
    default_message = "GraphQL request failed"


# Errors the client raises for a failed operation.
CLIENT_ERRORS = (CMSError, httpx.HTTPError)


def error_from_response(error: dict) -> CMSError:
    """Map a GraphQL error entry back onto the quillcms error taxonomy."""
    code = (error.get("extensions") or {}).get("code")
    cls = ERRORS_BY_CODE.get(code, GraphQLClientError)
    return cls(error.get("message"))


class GraphQLClient:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        endpoint: str = "/graphql",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.token = token
        self.endpoint = endpoint
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)
        self._watched: list[WatchedQuery] = []

    async def __aenter__(self) -> "GraphQLClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def execute(self, document: str, variables: dict | None = None) -> dict:
        """Run *document* and return its ``data``; raise on any error."""
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        resp = await self._http.post(
            self.endpoint,
            json={"query": document, "variables": variables or {}},
            headers=headers,
        )
        try:
            payload = resp.json()
        except ValueError:
            resp.raise_for_status()
            raise GraphQLClientError(f"Unexpected response from {resp.url}")

        if payload.get("errors"):
            raise error_from_response(payload["errors"][0])
        resp.raise_for_status()
        return payload["data"]

    def watch(self, document: str, variables: dict | None = None) -> "WatchedQuery":
        return WatchedQuery(self, document, variables)

    async def mutate(
        self,
        document: str,
        variables: dict | None = None,
        refetch_queries: Iterable[str] = (),
    ) -> dict:
        """Run a mutation, then refetch watched queries it invalidates."""
        data = await self.execute(document, variables)
        await self.refetch(refetch_queries)
        return data

    async def refetch(self, documents: Iterable[str]) -> None:
        documents = set(documents)
        for query in list(self._watched):
            if query.document in documents:
                # Failures are delivered to the query's subscribers.
                await query.publish()

    def _register(self, query: "WatchedQuery") -> None:
        if query not in self._watched:
            self._watched.append(query)

    def _unregister(self, query: "WatchedQuery") -> None:
        if query in self._watched:
            self._watched.remove(query)


class WatchedQuery:
    def __init__(self, client: GraphQLClient, document: str, variables: dict | None = None) -> None:
        self.document = document
        self.variables = variables or {}
        self._client = client
        self._subscribers: list[asyncio.Queue] = []
        self._latest: dict | None = None

    def subscribe(self) -> "QuerySubscription":
        queue: asyncio.Queue = asyncio.Queue()
        if self._latest is not None:
            queue.put_nowait((self._latest, None))
        self._subscribers.append(queue)
        self._client._register(self)
        return QuerySubscription(self, queue)

    async def publish(self) -> tuple[dict | None, Exception | None]:
        """Fetch the query and push the outcome to every subscriber."""
        try:
            data = await self._client.execute(self.document, self.variables)
        except CLIENT_ERRORS as exc:
            logger.debug("Watched query failed: %s", exc)
            outcome = (None, exc)
        else:
            self._latest = data
            outcome = (data, None)

        for queue in self._subscribers:
            queue.put_nowait(outcome)
        return outcome

    async def refetch(self) -> dict:
        data, exc = await self.publish()
        if exc is not None:
            raise exc
        return data

    def _unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)
        if not self._subscribers:
            self._client._unregister(self)


class QuerySubscription:
    """Async iterator over the results of one subscriber of a WatchedQuery."""

    def __init__(self, query: WatchedQuery, queue: asyncio.Queue) -> None:
        self._query = query
        self._queue = queue
        self._started = False
        self._closed = False

    def __aiter__(self) -> "QuerySubscription":
        return self

    async def __anext__(self) -> Any:
        if self._closed:
            raise StopAsyncIteration
        if not self._started:
            self._started = True
            if self._queue.empty():
                await self._query.publish()

        data, exc = await self._queue.get()
        if exc is not None:
            await self.aclose()
            raise exc
        return data

    async def aclose(self) -> None:
        if not self._closed:
            self._closed = True
            self._query._unsubscribe(self._queue)
