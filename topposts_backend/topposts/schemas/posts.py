from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Comment(BaseModel):
    """A comment as served by the upstream /comments resource."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    postId: int
    name: str = ""
    email: str = ""
    body: str = ""


class Post(BaseModel):
    """A post as served by the upstream /posts resource."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    title: str = ""
    body: str = ""


class CommentDetail(BaseModel):
    id: int
    name: str
    email: str
    body: str


class FormattedPost(BaseModel):
    post_id: int
    post_title: str
    post_body: str
    total_number_of_comments: int
    comments: list[CommentDetail] | None = Field(default=None)
