from __future__ import annotations

import asyncio

import pytest

from topposts.core.exceptions import UpstreamPayloadError
from topposts.services.cache import ResourceCache
from topposts.services.top_posts_service import TopPostsService

from conftest import FakeSource


def test_top_posts_sorted_without_comment_detail(service: TopPostsService) -> None:
    result = asyncio.run(service.get_top_posts())

    assert [(p.post_id, p.total_number_of_comments) for p in result] == [(2, 3), (1, 1), (3, 0)]
    assert all(p.comments is None for p in result)


def test_search_keeps_only_posts_with_matching_comments(service: TopPostsService) -> None:
    # when: "bob" matches Bob (post 1) and bobby (post 2)
    result = asyncio.run(service.search_posts({"name": "bob"}))

    # then: totals still count every comment of the post
    assert [(p.post_id, p.total_number_of_comments) for p in result] == [(2, 3), (1, 1)]
    assert [c.id for c in result[0].comments or []] == [22]
    assert [c.id for c in result[1].comments or []] == [10]


def test_search_combines_comment_and_post_filters(service: TopPostsService) -> None:
    result = asyncio.run(service.search_posts({"email": "x.com", "post_title": "hello"}))

    assert [p.post_id for p in result] == [1]


def test_search_without_matches_returns_empty_list(service: TopPostsService) -> None:
    assert asyncio.run(service.search_posts({"post_id": "3"})) == []


def test_end_to_end_single_post(cache: ResourceCache) -> None:
    source = FakeSource(
        {
            "posts": [{"id": 1, "title": "A", "body": "x"}],
            "comments": [{"id": 10, "postId": 1, "name": "Bob", "email": "b@x.com", "body": "nice"}],
        }
    )
    service = TopPostsService(cache, source)  # type: ignore[arg-type]

    top = asyncio.run(service.get_top_posts())
    found = asyncio.run(service.search_posts({"name": "bob"}))

    assert [p.model_dump(exclude_none=True) for p in top] == [
        {"post_id": 1, "post_title": "A", "post_body": "x", "total_number_of_comments": 1}
    ]
    assert [p.model_dump() for p in found] == [
        {
            "post_id": 1,
            "post_title": "A",
            "post_body": "x",
            "total_number_of_comments": 1,
            "comments": [{"id": 10, "name": "Bob", "email": "b@x.com", "body": "nice"}],
        }
    ]


def test_both_output_shapes_share_one_cached_copy(
    service: TopPostsService, source: FakeSource
) -> None:
    asyncio.run(service.get_top_posts())
    asyncio.run(service.search_posts({"name": "bob"}))

    assert source.calls == ["comments", "posts"]


def test_malformed_upstream_record_raises_payload_error(cache: ResourceCache) -> None:
    source = FakeSource({"comments": [{"id": "not-a-number"}], "posts": []})
    service = TopPostsService(cache, source)  # type: ignore[arg-type]

    with pytest.raises(UpstreamPayloadError):
        asyncio.run(service.get_top_posts())
