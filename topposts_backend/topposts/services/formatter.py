from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..schemas.posts import FormattedPost, Post
from .aggregator import CommentAggregate
from .filters import matches


def format_posts(
    posts: Iterable[Post],
    aggregates: Mapping[int, CommentAggregate],
    with_details: bool = False,
    filters: Mapping[str, Any] | None = None,
) -> list[FormattedPost]:
    """Join posts with their comment aggregates, filter, and sort by comment count.

    Posts without comments count as zero. In detail mode a post is only kept
    when at least one of its comments passed the comment filter.
    """
    filters = filters or {}
    empty = CommentAggregate()

    items: list[FormattedPost] = []
    for post in posts:
        aggregate = aggregates.get(post.id, empty)
        formatted = FormattedPost(
            post_id=post.id,
            post_title=post.title,
            post_body=post.body,
            total_number_of_comments=aggregate.total,
        )
        if with_details:
            formatted.comments = list(aggregate.details.values())

        if not matches(formatted.model_dump(exclude={"comments"}), filters):
            continue
        if with_details and not formatted.comments:
            continue
        items.append(formatted)

    # stable: equal counts keep upstream order
    return sorted(items, key=lambda p: p.total_number_of_comments, reverse=True)
