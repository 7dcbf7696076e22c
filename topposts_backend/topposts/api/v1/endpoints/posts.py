from __future__ import annotations

import json
import logging
from typing import Any, List, Mapping

from fastapi import APIRouter, Depends, HTTPException, Request

from ....core.config import Settings, get_settings
from ....schemas.posts import FormattedPost
from ....services.top_posts_service import TopPostsService, get_top_posts_service


logger = logging.getLogger(__name__)

router = APIRouter()


def _randomize_requested(params: Mapping[str, Any], settings: Settings) -> bool:
    if "random" not in params:
        return False
    if not settings.enable_random_counts:
        logger.debug("ignoring random flag: ENABLE_RANDOM_COUNTS is off")
        return False
    return True


async def _collect_filters(request: Request) -> dict[str, Any]:
    """Merge query string and body fields; body values win."""
    filters: dict[str, Any] = dict(request.query_params)

    raw = await request.body()
    if not raw:
        return filters

    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = json.loads(raw)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON body")
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Filter body must be a JSON object")
        filters.update(payload)
    elif content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        filters.update({k: v for k, v in form.items() if isinstance(v, str)})
    return filters


@router.get(
    "/getTopPosts",
    response_model=List[FormattedPost],
    response_model_exclude_none=True,
    summary="Top posts ordered by their number of comments",
)
async def get_top_posts(
    request: Request,
    settings: Settings = Depends(get_settings),
    service: TopPostsService = Depends(get_top_posts_service),
) -> List[FormattedPost]:
    return await service.get_top_posts(
        randomize=_randomize_requested(request.query_params, settings)
    )


@router.post(
    "/searchPost",
    response_model=List[FormattedPost],
    summary="Top posts with their comments, filtered by post and comment fields",
)
async def search_post(
    request: Request,
    settings: Settings = Depends(get_settings),
    service: TopPostsService = Depends(get_top_posts_service),
) -> List[FormattedPost]:
    filters = await _collect_filters(request)
    return await service.search_posts(filters, randomize=_randomize_requested(filters, settings))
