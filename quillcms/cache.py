"""
Redis read-through cache for published article lists and article details.

Writes never touch Redis directly.  A service that changes an article
records it on the request's session (``mark_stale``); the ``get_db``
dependency purges the recorded keys only after the transaction commits
(``purge_committed``) and forgets them on rollback (``discard_pending``).
A session carrying unpublished writes bypasses the cache in both
directions, so uncommitted rows are never served to, or stored for,
other requests.

With Redis unavailable every read is a miss and the API serves straight
from the database.
"""
import json
import logging
from typing import Awaitable, Callable

import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncSession

from quillcms.config import settings

logger = logging.getLogger(__name__)

PUBLISHED_LIST_PREFIX = "articles:published"
DETAIL_PREFIX = "articles:detail"

# Key in ``AsyncSession.info`` holding the article ids written in the
# current transaction.  ``None`` in the set means "lists only".
STALE_ARTICLES = "quillcms.stale_articles"


def published_list_key(filter: str | None, skip: int, first: int | None) -> str:
    return f"{PUBLISHED_LIST_PREFIX}:{skip}:{first}:{filter or ''}"


def detail_key(article_id: str) -> str:
    return f"{DETAIL_PREFIX}:{article_id}"


def has_pending_writes(db: AsyncSession) -> bool:
    return bool(db.info.get(STALE_ARTICLES))


class ArticleCache:
    def __init__(self) -> None:
        self._redis: redis.Redis | None = None
        self._counters = {"hits": 0, "misses": 0, "bypassed": 0, "purged": 0}

    async def connect(self) -> None:
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await self._redis.ping()
            logger.info("Article cache using Redis at %s", settings.REDIS_URL)
        except Exception as exc:  # pragma: no cover
            logger.warning("Redis ping failed, serving without cache: %s", exc)

    async def disconnect(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def read_through(
        self,
        db: AsyncSession,
        key: str,
        ttl: int,
        load: Callable[[], Awaitable[dict | list]],
    ) -> dict | list:
        """
        Return the cached value for *key*, or ``await load()`` and store it.

        Skips Redis entirely while *db* holds uncommitted article writes.
        """
        if has_pending_writes(db):
            self._counters["bypassed"] += 1
            return await load()

        cached = await self._fetch(key)
        if cached is not None:
            self._counters["hits"] += 1
            return cached

        self._counters["misses"] += 1
        value = await load()
        await self._store(key, value, ttl)
        return value

    async def _fetch(self, key: str) -> dict | list | None:
        if not self._redis:
            return None
        try:
            raw = await self._redis.get(key)
        except Exception as exc:
            logger.debug("Article cache read failed for %r: %s", key, exc)
            return None
        return json.loads(raw) if raw is not None else None

    async def _store(self, key: str, value: dict | list, ttl: int) -> None:
        if not self._redis:
            return
        try:
            await self._redis.set(key, json.dumps(value), ex=ttl)
        except Exception as exc:
            logger.debug("Article cache write failed for %r: %s", key, exc)

    # ------------------------------------------------------------------
    # Transaction-scoped invalidation
    # ------------------------------------------------------------------

    def mark_stale(self, db: AsyncSession, article_id: str | None = None) -> None:
        """Record that this transaction changed *article_id* (or only the lists)."""
        db.info.setdefault(STALE_ARTICLES, set()).add(article_id)

    def discard_pending(self, db: AsyncSession) -> None:
        db.info.pop(STALE_ARTICLES, None)

    async def purge_committed(self, db: AsyncSession) -> None:
        """Drop the keys made stale by a transaction that has just committed."""
        stale = db.info.pop(STALE_ARTICLES, None)
        if not stale or not self._redis:
            return

        keys = [detail_key(article_id) for article_id in stale if article_id is not None]
        try:
            async for key in self._redis.scan_iter(match=f"{PUBLISHED_LIST_PREFIX}:*"):
                keys.append(key)
            if keys:
                await self._redis.delete(*keys)
        except Exception as exc:
            logger.warning("Article cache purge failed, entries expire by TTL: %s", exc)
            return
        self._counters["purged"] += len(keys)
        logger.debug("Purged %d article cache key(s) after commit", len(keys))

    @property
    def stats(self) -> dict:
        """Counter snapshot reported by the health endpoint."""
        lookups = self._counters["hits"] + self._counters["misses"]
        return {
            **self._counters,
            "hit_rate": round(self._counters["hits"] / lookups * 100, 1) if lookups else 0.0,
        }


cache = ArticleCache()
