from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from ..schemas.posts import Comment, CommentDetail
from .filters import matches


@dataclass(slots=True)
class CommentAggregate:
    total: int = 0
    # comment id -> detail, in arrival order
    details: dict[int, CommentDetail] = field(default_factory=dict)


def aggregate_comments(
    comments: Iterable[Comment],
    want_details: bool = False,
    test_mode: bool = False,
    filters: Mapping[str, Any] | None = None,
    rng: random.Random | None = None,
) -> dict[int, CommentAggregate]:
    """Group comments by post id and count them.

    With `want_details`, comments passing `filters` are kept as CommentDetail
    under their post. The total always counts every comment, filtered or not.
    With `test_mode`, each comment after the first one of a post adds a random
    1..100 to the total instead of 1.
    """
    filters = filters or {}
    rng = rng or random

    aggregates: dict[int, CommentAggregate] = {}
    for comment in comments:
        aggregate = aggregates.get(comment.postId)
        if aggregate is None:
            aggregate = aggregates[comment.postId] = CommentAggregate(total=1)
        elif test_mode:
            aggregate.total += rng.randint(1, 100)
        else:
            aggregate.total += 1

        if want_details and matches(comment.model_dump(), filters):
            aggregate.details[comment.id] = CommentDetail(
                id=comment.id,
                name=comment.name,
                email=comment.email,
                body=comment.body,
            )

    return aggregates
