"""Repository for PostRecord persistence.

All methods operate on a caller-supplied SQLAlchemy ``Session`` so that
transaction boundaries remain under the caller's control.

Outcomes other than success are explicit exception types:
:class:`PostValidationError` when a record would violate the post
invariants, :class:`InvalidIdentifierError` when an identifier cannot be
used for lookup, :class:`~backend.app.db.errors.DatabaseLockedError` when
SQLite is busy.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import func
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, joinedload

from backend.app.core.settings import settings
from backend.app.db.errors import handle_operational_error
from backend.app.models.identifiers import is_valid_id
from backend.app.models.post_record import TITLE_MAX_LENGTH, PostRecord

logger = logging.getLogger(__name__)


class PostValidationError(Exception):
    """Raised when a post fails field validation on create or save."""


class InvalidIdentifierError(Exception):
    """Raised when a malformed identifier is used for lookup."""


def _utc_now() -> datetime:
    return datetime.now(UTC)


def validate_post(record: PostRecord) -> None:
    """Check the whole record against the post invariants.

    Raises:
        PostValidationError: listing every failing field.
    """
    problems: list[str] = []

    if not record.title or not record.title.strip():
        problems.append("title: Title is required")
    elif len(record.title) > TITLE_MAX_LENGTH:
        problems.append(
            f"title: Title must be at most {TITLE_MAX_LENGTH} characters"
        )

    if not record.content or not record.content.strip():
        problems.append("content: Content is required")

    if not record.author_id:
        problems.append("author: Author is required")

    if record.category_id is not None and not is_valid_id(record.category_id):
        problems.append("category: Invalid category ID")

    if problems:
        raise PostValidationError("Post validation failed: " + ", ".join(problems))


def _check_id(value: str, field: str) -> None:
    if not is_valid_id(value):
        raise InvalidIdentifierError(f"Cast to identifier failed for {field}={value!r}")


# ---------------------------------------------------------------------------
# Repository methods
# ---------------------------------------------------------------------------


def create_post(
    db: Session,
    *,
    title: str,
    content: str,
    author_id: str,
    category_id: str | None = None,
) -> PostRecord:
    """Validate and insert a new post, flushing to surface DB errors."""
    now = _utc_now()
    record = PostRecord(
        title=title,
        content=content,
        author_id=author_id,
        category_id=category_id or None,
        created_at=now,
        updated_at=now,
    )
    validate_post(record)

    db.add(record)
    try:
        db.flush()
    except OperationalError as exc:
        handle_operational_error(exc, "create_post")
    logger.info(
        "post_record_created: id=%s author_id=%s title_len=%d content_len=%d",
        record.id,
        author_id,
        len(title),
        len(content),
    )
    return record


def find_post_by_id(
    db: Session,
    post_id: str,
    *,
    with_author: bool = False,
) -> PostRecord | None:
    """Fetch a post by primary key, or ``None`` if it does not exist.

    Raises:
        InvalidIdentifierError: If *post_id* is malformed.
    """
    _check_id(post_id, "id")
    if with_author:
        return db.get(PostRecord, post_id, options=[joinedload(PostRecord.author)])
    return db.get(PostRecord, post_id)


def find_posts(
    db: Session,
    *,
    category_id: str | None = None,
    offset: int = 0,
    limit: int | None = None,
) -> list[PostRecord]:
    """List posts with their authors, optionally filtered by category.

    Rows come back in insertion order (``created_at`` then ``id``) so that
    consecutive pages do not overlap.

    Raises:
        InvalidIdentifierError: If *category_id* is malformed.
    """
    if limit is None:
        limit = settings.default_page_size
    query = db.query(PostRecord).options(joinedload(PostRecord.author))

    if category_id is not None:
        _check_id(category_id, "category")
        query = query.filter(PostRecord.category_id == category_id)

    query = query.order_by(PostRecord.created_at.asc(), PostRecord.id.asc())
    return list(query.offset(offset).limit(limit).all())


def count_posts(db: Session, *, category_id: str | None = None) -> int:
    """Return the number of posts matching the same filter as :func:`find_posts`."""
    query = db.query(func.count(PostRecord.id))
    if category_id is not None:
        _check_id(category_id, "category")
        query = query.filter(PostRecord.category_id == category_id)
    return query.scalar() or 0


def save_post(db: Session, record: PostRecord) -> PostRecord:
    """Re-validate a modified post and flush it.

    Raises:
        PostValidationError: If the merged record breaks an invariant.
    """
    validate_post(record)
    record.updated_at = _utc_now()
    try:
        db.flush()
    except OperationalError as exc:
        handle_operational_error(exc, "save_post")
    logger.info(
        "post_record_saved: id=%s title_len=%d content_len=%d",
        record.id,
        len(record.title),
        len(record.content),
    )
    return record


def remove_post(db: Session, record: PostRecord) -> None:
    """Permanently delete a post."""
    post_id = record.id
    db.delete(record)
    try:
        db.flush()
    except OperationalError as exc:
        handle_operational_error(exc, "remove_post")
    logger.info("post_record_deleted: id=%s", post_id)
