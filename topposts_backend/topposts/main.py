from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.v1.endpoints import posts
from .core import runtime
from .core.config import Settings, get_settings
from .core.exceptions import TransportError
from .core.logger import setup_logger
from .core.memory_redis import AsyncMemoryRedis
from .services.cache import ResourceCache
from .services.source import RemoteDataSource, build_http_client


logger = logging.getLogger(__name__)


def _create_cache_client(settings: Settings) -> Any:
    redis_url = settings.redis_url
    if settings.use_fake_redis or redis_url.startswith("memory://") or redis_url.startswith("redis+fake://"):
        logger.info("using in-process memory cache")
        return AsyncMemoryRedis()

    # Lazy import so memory-only runs do not need a redis server
    import redis.asyncio as redis

    return redis.from_url(redis_url, decode_responses=True)


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore[override]
    settings = get_settings()
    cache_client = _create_cache_client(settings)
    try:
        await cache_client.ping()
    except Exception as exc:  # noqa: BLE001
        # opportunistic; the app still boots and /healthz reports it
        logger.warning("cache ping failed: %s", exc)

    http_client = build_http_client(settings.upstream_timeout_seconds)
    runtime.cache_client = cache_client
    runtime.resource_cache = ResourceCache(
        cache_client,
        ttl_seconds=settings.cache_ttl_seconds,
        key_prefix=settings.cache_key_prefix,
    )
    runtime.data_source = RemoteDataSource(
        http_client,
        settings.upstream_base_url,
        max_retries=settings.upstream_max_retries,
        backoff_seconds=settings.upstream_retry_backoff_seconds,
    )
    try:
        yield
    finally:
        await http_client.aclose()
        await cache_client.aclose()
        runtime.cache_client = None
        runtime.resource_cache = None
        runtime.data_source = None


async def transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
    logger.error("upstream failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=502,
        content={"detail": "upstream unavailable", "resource": exc.resource},
    )


def create_app() -> FastAPI:
    setup_logger(name="topposts")
    settings = get_settings()
    app = FastAPI(title="Top Posts Service", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(TransportError, transport_error_handler)

    app.include_router(posts.router, tags=["posts"])  # e.g., /getTopPosts
    app.include_router(posts.router, prefix="/api", tags=["posts"])  # e.g., /api/searchPost

    @app.get("/healthz")
    async def healthz() -> dict[str, Any]:
        status: dict[str, Any] = {"ok": True}
        if runtime.cache_client is None:
            status["cache"] = {"connected": False, "message": "cache not initialized"}
            return status
        try:
            pong = await runtime.cache_client.ping()
            status["cache"] = {"connected": bool(pong)}
        except Exception as e:  # pragma: no cover - diagnostic only
            status["cache"] = {"connected": False, "error": str(e)}
        return status

    return app


app = create_app()


def main() -> None:
    import uvicorn

    port = int(os.getenv("TOPPOSTS_PORT", "8000"))
    uvicorn.run("topposts.main:app", host="0.0.0.0", port=port, reload=False)


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
