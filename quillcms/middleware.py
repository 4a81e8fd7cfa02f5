"""
Per-request instrumentation.

Each HTTP request gets a ``RequestStats`` object through a context var.
The engine listener counts SQL statements into it and the GraphQL route
names the operation; ``RequestStatsMiddleware`` reports both as response
headers.  The object is shared by reference, so statements issued from
resolver tasks that graphql-core runs concurrently are counted too.
"""
import logging
import time
from contextvars import ContextVar
from dataclasses import dataclass

from sqlalchemy import event
from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)


@dataclass
class RequestStats:
    queries: int = 0
    operation: str | None = None


request_stats_var: ContextVar[RequestStats | None] = ContextVar("request_stats", default=None)


def current_request_stats() -> RequestStats | None:
    return request_stats_var.get()


def install_query_counter(engine) -> None:
    """Count every statement *engine* executes against the current request."""

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def _count_statement(conn, cursor, statement, parameters, context, executemany):
        stats = request_stats_var.get()
        if stats is not None:
            stats.queries += 1


class RequestStatsMiddleware:
    """
    Adds ``X-Response-Time-Ms``, ``X-Query-Count`` and, for named GraphQL
    operations, ``X-GraphQL-Operation`` to every HTTP response.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        stats = RequestStats()
        reset_token = request_stats_var.set(stats)
        start = time.perf_counter()

        async def send_with_stats(message):
            if message["type"] == "http.response.start":
                elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
                headers = list(message.get("headers", []))
                headers.append((b"x-response-time-ms", str(elapsed_ms).encode()))
                headers.append((b"x-query-count", str(stats.queries).encode()))
                if stats.operation:
                    headers.append((b"x-graphql-operation", stats.operation.encode()))
                message["headers"] = headers
                logger.debug(
                    "%s %s op=%s status=%s %sms queries=%d",
                    scope["method"],
                    scope["path"],
                    stats.operation or "-",
                    message["status"],
                    elapsed_ms,
                    stats.queries,
                )
            await send(message)

        try:
            await self.app(scope, receive, send_with_stats)
        finally:
            request_stats_var.reset(reset_token)
