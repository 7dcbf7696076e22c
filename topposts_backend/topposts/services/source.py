from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from ..core.exceptions import TransportError, UpstreamPayloadError


logger = logging.getLogger(__name__)

RESOURCE_COMMENTS = "comments"
RESOURCE_POSTS = "posts"


def build_http_client(timeout_seconds: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout_seconds,
        follow_redirects=True,
        headers={"Accept": "application/json"},
    )


class RemoteDataSource:
    """Reads a named resource (a JSON array) from the upstream REST API.

    Connection errors, timeouts and 5xx answers are retried with exponential
    backoff, up to `max_retries` extra attempts. 4xx answers fail at once.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        *,
        max_retries: int = 2,
        backoff_seconds: float = 0.5,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds

    def url_for(self, resource: str) -> str:
        return f"{self._base_url}/{resource}"

    async def fetch(self, resource: str) -> list[Any]:
        url = self.url_for(resource)
        attempts = self._max_retries + 1
        attempt = 0

        while True:
            attempt += 1
            try:
                resp = await self._client.get(url)
            except httpx.HTTPError as exc:
                error = TransportError(resource, f"request to {url} failed: {exc}")
            else:
                if resp.is_success:
                    return self._decode(resource, resp)
                error = TransportError(
                    resource,
                    f"GET {url} answered {resp.status_code}",
                    status_code=resp.status_code,
                )
                if resp.status_code < 500:
                    raise error

            logger.warning("upstream attempt %d/%d failed: %s", attempt, attempts, error)
            if attempt >= attempts:
                raise error
            await asyncio.sleep(self._backoff_seconds * (2 ** (attempt - 1)))

    def _decode(self, resource: str, resp: httpx.Response) -> list[Any]:
        try:
            payload = resp.json()
        except ValueError as exc:
            raise UpstreamPayloadError(resource, "invalid JSON body") from exc

        if not isinstance(payload, list):
            raise UpstreamPayloadError(
                resource, f"expected a JSON array, got {type(payload).__name__}"
            )
        logger.info("fetched %d %s from upstream", len(payload), resource)
        return payload
