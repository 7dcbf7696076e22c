from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

from ..core.config import DEFAULT_CACHE_TTL_SECONDS


logger = logging.getLogger(__name__)


class ResourceCache:
    """TTL cache for upstream resources on top of a redis-like async client.

    Payloads are stored JSON-encoded under `<prefix>:resource:<name>`. Expiry is
    left to the store, so an expired entry simply reads as absent.
    """

    def __init__(
        self,
        client: Any,
        *,
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        key_prefix: str = "topposts",
    ) -> None:
        self._client = client
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix
        self._locks: dict[str, asyncio.Lock] = {}

    def key_for(self, resource: str) -> str:
        return f"{self._key_prefix}:resource:{resource}"

    async def has(self, key: str) -> bool:
        return bool(await self._client.exists(key))

    async def get(self, key: str) -> Any | None:
        raw = await self._client.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        ttl_seconds = ttl if ttl is not None else self._ttl_seconds
        await self._client.setex(key, ttl_seconds, json.dumps(value))
        logger.debug("cached %s for %ds", key, ttl_seconds)

    async def get_or_fetch(
        self, resource: str, loader: Callable[[str], Awaitable[Any]]
    ) -> Any:
        """Return the cached resource, fetching it through `loader` on a miss.

        Concurrent misses for the same key wait on one lock, so only the first
        caller reaches the upstream and the rest read what it stored.
        """
        key = self.key_for(resource)
        cached = await self.get(key)
        if cached is not None:
            logger.debug("cache hit: %s", key)
            return cached

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            cached = await self.get(key)
            if cached is not None:
                logger.debug("cache hit after wait: %s", key)
                return cached

            logger.info("cache miss: %s, fetching from upstream", key)
            value = await loader(resource)
            await self.put(key, value)
            return value
