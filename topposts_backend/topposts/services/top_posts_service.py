from __future__ import annotations

import logging
import random
from typing import Any, Mapping

from fastapi import HTTPException
from pydantic import ValidationError

import topposts.core.runtime as runtime
from ..core.exceptions import UpstreamPayloadError
from ..schemas.posts import Comment, FormattedPost, Post
from .aggregator import aggregate_comments
from .cache import ResourceCache
from .formatter import format_posts
from .source import RESOURCE_COMMENTS, RESOURCE_POSTS, RemoteDataSource


logger = logging.getLogger(__name__)


class TopPostsService:
    """Builds the top-posts listing from the cached upstream posts and comments.

    - Depends only on the injected cache and data source, never on globals.
    - One canonical cache entry per upstream resource serves both output shapes.
    """

    def __init__(
        self,
        cache: ResourceCache,
        source: RemoteDataSource,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._cache = cache
        self._source = source
        self._rng = rng

    async def get_top_posts(self, randomize: bool = False) -> list[FormattedPost]:
        return await self.get_post_list(False, {}, randomize)

    async def search_posts(
        self, filters: Mapping[str, Any], randomize: bool = False
    ) -> list[FormattedPost]:
        return await self.get_post_list(True, filters, randomize)

    async def get_post_list(
        self,
        include_details: bool,
        filters: Mapping[str, Any] | None = None,
        randomize: bool = False,
    ) -> list[FormattedPost]:
        filters = filters or {}

        raw_comments = await self._cache.get_or_fetch(RESOURCE_COMMENTS, self._source.fetch)
        comments = _parse_records(RESOURCE_COMMENTS, Comment, raw_comments)
        aggregates = aggregate_comments(
            comments,
            want_details=include_details,
            test_mode=randomize,
            filters=filters,
            rng=self._rng,
        )

        raw_posts = await self._cache.get_or_fetch(RESOURCE_POSTS, self._source.fetch)
        posts = _parse_records(RESOURCE_POSTS, Post, raw_posts)

        result = format_posts(posts, aggregates, with_details=include_details, filters=filters)
        logger.info(
            "built post list: details=%s comments=%d posts=%d returned=%d",
            include_details,
            len(comments),
            len(posts),
            len(result),
        )
        return result


def _parse_records(resource: str, model: type, raw: list[Any]) -> list[Any]:
    try:
        return [model.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise UpstreamPayloadError(resource, f"malformed record: {exc}") from exc


def get_top_posts_service() -> TopPostsService:
    """FastAPI DI factory for TopPostsService."""
    if runtime.resource_cache is None or runtime.data_source is None:
        raise HTTPException(status_code=500, detail="Cache not initialized")
    return TopPostsService(runtime.resource_cache, runtime.data_source)
