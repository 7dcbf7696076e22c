from __future__ import annotations

import logging

import pytest
import redis.asyncio as redis
from fastapi.testclient import TestClient

import topposts.core.runtime as runtime
from topposts.core.config import Settings
from topposts.core.logger import setup_logger
from topposts.core.memory_redis import AsyncMemoryRedis
from topposts.main import _create_cache_client, create_app
from topposts.services.cache import ResourceCache
from topposts.services.source import RemoteDataSource


@pytest.fixture
def memory_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("USE_FAKE_REDIS", "1")
    monkeypatch.setenv("UPSTREAM_BASE_URL", "https://upstream.test")
    monkeypatch.setenv("CACHE_KEY_PREFIX", "lifespan")
    # force create_app() to read the environment above
    monkeypatch.setattr(runtime, "settings", None)


def test_lifespan_wires_runtime_and_resets_on_shutdown(memory_env: None) -> None:
    with TestClient(create_app()) as client:
        resp = client.get("/healthz")

        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "cache": {"connected": True}}
        assert isinstance(runtime.cache_client, AsyncMemoryRedis)
        assert isinstance(runtime.resource_cache, ResourceCache)
        assert runtime.resource_cache.key_for("posts") == "lifespan:resource:posts"
        assert isinstance(runtime.data_source, RemoteDataSource)
        assert runtime.data_source.url_for("posts") == "https://upstream.test/posts"

    assert runtime.cache_client is None
    assert runtime.resource_cache is None
    assert runtime.data_source is None


@pytest.mark.parametrize("redis_url", ["memory://", "redis+fake://local"])
def test_memory_urls_select_the_in_process_store(redis_url: str) -> None:
    client = _create_cache_client(Settings(redis_url=redis_url))

    assert isinstance(client, AsyncMemoryRedis)


def test_redis_url_selects_redis_client() -> None:
    client = _create_cache_client(Settings(redis_url="redis://cache.internal:6379/3"))

    assert isinstance(client, redis.Redis)


def test_setup_logger_replaces_its_handler() -> None:
    setup_logger(name="topposts-test", level="debug")
    logger = setup_logger(name="topposts-test", level="warning")

    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
