from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Dict, Optional


class AsyncMemoryRedis:
    """In-process stand-in for the subset of redis.asyncio the cache uses.

    Values are stored as strings, like a client created with decode_responses=True.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._kv: Dict[str, str] = {}
        self._ttl: Dict[str, float] = {}
        self._clock = clock
        self._lock = asyncio.Lock()

    def _cleanup(self) -> None:
        now = self._clock()
        expired = [k for k, t in self._ttl.items() if t <= now]
        for k in expired:
            self._kv.pop(k, None)
            self._ttl.pop(k, None)

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        return None

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            self._cleanup()
            return self._kv.get(key)

    async def setex(self, key: str, ttl_seconds: int, value: Any) -> bool:
        if ttl_seconds <= 0:
            raise ValueError("invalid expire time in 'setex' command")
        async with self._lock:
            self._cleanup()
            self._kv[key] = str(value)
            self._ttl[key] = self._clock() + ttl_seconds
            return True

    async def exists(self, *keys: str) -> int:
        async with self._lock:
            self._cleanup()
            return sum(1 for k in keys if k in self._kv)
