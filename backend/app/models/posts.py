"""Pydantic models for post requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, field_validator

from backend.app.models.post_record import PostRecord


def _scalar_to_str(v: Any) -> Any:
    """Cast JSON numbers and booleans to their string form; leave the rest."""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    if isinstance(v, int | float):
        return str(v)
    return v


class PostCreateBody(BaseModel):
    """Body of a create request.

    Every field is optional at the schema level: missing and empty values
    are judged by the controller so the response contract stays stable.
    """

    title: str | None = None
    content: str | None = None
    category: str | None = None

    @field_validator("title", "content", "category", mode="before")
    @classmethod
    def cast_scalars(cls, v: Any) -> Any:
        return _scalar_to_str(v)


class PostUpdateBody(BaseModel):
    """Partial update. Omitted or empty fields keep their stored value."""

    title: str | None = None
    content: str | None = None
    category: str | None = None

    @field_validator("title", "content", "category", mode="before")
    @classmethod
    def cast_scalars(cls, v: Any) -> Any:
        return _scalar_to_str(v)


class PostListQuery(BaseModel):
    """Raw list query parameters, parsed by the controller."""

    category: str | None = None
    page: str | None = None
    limit: str | None = None


class AuthorSummary(BaseModel):
    """Display-safe projection of a post's author."""

    id: str
    username: str


class PostResponse(BaseModel):
    """A post with its author as a bare identifier (create/update)."""

    id: str
    title: str
    content: str
    category: str | None = None
    author: str
    created_at: datetime
    updated_at: datetime


class PostDetailResponse(BaseModel):
    """A post with its author resolved to :class:`AuthorSummary` (list/get)."""

    id: str
    title: str
    content: str
    category: str | None = None
    author: AuthorSummary | None = None
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    message: str


def to_post_response(record: PostRecord) -> PostResponse:
    """Convert a DB row to a :class:`PostResponse`."""
    return PostResponse(
        id=record.id,
        title=record.title,
        content=record.content,
        category=record.category_id,
        author=record.author_id,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def to_post_detail(record: PostRecord) -> PostDetailResponse:
    """Convert a DB row (author loaded) to a :class:`PostDetailResponse`."""
    author = None
    if record.author is not None:
        author = AuthorSummary(id=record.author.id, username=record.author.username)
    return PostDetailResponse(
        id=record.id,
        title=record.title,
        content=record.content,
        category=record.category_id,
        author=author,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )
