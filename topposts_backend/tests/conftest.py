from __future__ import annotations

from typing import Any

import pytest

from topposts.core.memory_redis import AsyncMemoryRedis
from topposts.services.cache import ResourceCache
from topposts.services.top_posts_service import TopPostsService


POSTS: list[dict[str, Any]] = [
    {"userId": 1, "id": 1, "title": "Hello world", "body": "first body"},
    {"userId": 1, "id": 2, "title": "Second post", "body": "Python tips"},
    {"userId": 2, "id": 3, "title": "Lonely post", "body": "nobody comments here"},
]

COMMENTS: list[dict[str, Any]] = [
    {"postId": 1, "id": 10, "name": "Bob", "email": "bob@x.com", "body": "nice"},
    {"postId": 2, "id": 20, "name": "Alice", "email": "alice@y.org", "body": "Great tips"},
    {"postId": 2, "id": 21, "name": "Carol", "email": "carol@x.com", "body": "thanks"},
    {"postId": 2, "id": 22, "name": "bobby", "email": "bobby@z.net", "body": "Hello again"},
]


class FakeSource:
    """RemoteDataSource stand-in serving fixed payloads and counting calls."""

    def __init__(self, payloads: dict[str, list[Any]]) -> None:
        self._payloads = payloads
        self.calls: list[str] = []

    async def fetch(self, resource: str) -> list[Any]:
        self.calls.append(resource)
        return self._payloads[resource]


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_redis(clock: FakeClock) -> AsyncMemoryRedis:
    return AsyncMemoryRedis(clock=clock)


@pytest.fixture
def cache(memory_redis: AsyncMemoryRedis) -> ResourceCache:
    return ResourceCache(memory_redis, ttl_seconds=900, key_prefix="test")


@pytest.fixture
def source() -> FakeSource:
    return FakeSource({"posts": POSTS, "comments": COMMENTS})


@pytest.fixture
def service(cache: ResourceCache, source: FakeSource) -> TopPostsService:
    return TopPostsService(cache, source)  # type: ignore[arg-type]
