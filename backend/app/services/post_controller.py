"""Access control and persistence consistency for posts.

Each operation takes a session plus the parts of an inbound request and
returns a :class:`ControllerResult`. Domain failures never propagate:
they are translated into a status code and a payload that is either
``{"error": ...}`` (validation detail) or ``{"message": ...}`` (everything
else). Clients key on that distinction.

Mutations check, in order: the post exists, the caller is authenticated,
the caller is the author. A missing post is reported as not found even to
anonymous callers.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from backend.app.core.errors import normalize_db_error
from backend.app.core.logging import (
    EVENT_DB_READ_FAILED,
    EVENT_POST_ACCESS_DENIED,
    EVENT_POST_CREATED,
    EVENT_POST_DELETED,
    EVENT_POST_UPDATED,
    log_event,
)
from backend.app.core.settings import settings
from backend.app.models.identifiers import is_valid_id
from backend.app.models.post_record import PostRecord
from backend.app.models.posts import (
    PostCreateBody,
    PostListQuery,
    PostUpdateBody,
    to_post_detail,
    to_post_response,
)
from backend.app.services import post_repository
from backend.app.services.post_repository import (
    InvalidIdentifierError,
    PostValidationError,
)

logger = logging.getLogger(__name__)

MSG_TITLE_CONTENT_REQUIRED = "Title and content required"
MSG_UNAUTHENTICATED = "Unauthorized: Missing user authentication context."
MSG_FORBIDDEN = "Forbidden"
MSG_NOT_FOUND = "Post not found"
MSG_INVALID_CATEGORY_FILTER = "Invalid category ID"
MSG_INVALID_CATEGORY_FORMAT = "Invalid category ID format"
MSG_INVALID_PAGINATION = "Invalid pagination parameters"
MSG_CREATE_FAILED = "Failed to create post"
MSG_LIST_FAILED = "Error fetching posts"
MSG_GET_FAILED = "Error fetching post"
MSG_UPDATE_FAILED = "Update failed: Invalid data"
MSG_DELETE_FAILED = "Deletion failed"
MSG_DELETED = "Post deleted"

# Largest OFFSET SQLite accepts; later pages are necessarily empty.
_MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class Identity:
    """Reference to an authenticated caller."""

    user_id: str
    username: str | None = None


@dataclass(frozen=True)
class ControllerResult:
    """Status code plus JSON-ready payload."""

    status_code: int
    payload: Any


def _message(status_code: int, message: str) -> ControllerResult:
    return ControllerResult(status_code=status_code, payload={"message": message})


def _error(status_code: int, error: str) -> ControllerResult:
    return ControllerResult(status_code=status_code, payload={"error": error})


def _is_authenticated(identity: Identity | None) -> bool:
    return identity is not None and bool(identity.user_id)


def _authorize(
    identity: Identity | None,
    record: PostRecord,
    *,
    operation: str,
) -> ControllerResult | None:
    """Return a refusal for a non-owner, or ``None`` if *identity* owns *record*."""
    if not _is_authenticated(identity):
        log_event(
            logger, "warning", EVENT_POST_ACCESS_DENIED,
            operation=operation, post_id=record.id, reason="unauthenticated",
        )
        return _message(401, MSG_UNAUTHENTICATED)

    assert identity is not None
    if record.author_id != identity.user_id:
        log_event(
            logger, "warning", EVENT_POST_ACCESS_DENIED,
            operation=operation, post_id=record.id, reason="not_owner",
            user_id=identity.user_id,
        )
        return _message(403, MSG_FORBIDDEN)
    return None


def _parse_positive_int(raw: str | None, default: int) -> int:
    """Parse a query-string integer >= 1; blank means *default*."""
    if raw is None or not raw.strip():
        return default
    value = int(raw.strip())
    if value < 1:
        raise ValueError(f"expected a positive integer, got {value}")
    return value


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def create_post(
    db: Session,
    identity: Identity | None,
    body: PostCreateBody,
) -> ControllerResult:
    """Persist a new post authored by *identity*."""
    if not body.title or not body.content:
        return _error(400, MSG_TITLE_CONTENT_REQUIRED)

    # Author is mandatory; the auth dependency normally guarantees this.
    if not _is_authenticated(identity):
        return _message(401, MSG_UNAUTHENTICATED)
    assert identity is not None

    correlation_id = str(uuid.uuid4())
    try:
        record = post_repository.create_post(
            db,
            title=body.title,
            content=body.content,
            author_id=identity.user_id,
            category_id=body.category or None,
        )
        db.commit()
    except PostValidationError as exc:
        db.rollback()
        return _error(400, str(exc))
    except Exception as exc:
        db.rollback()
        normalize_db_error(exc, operation="create_post", correlation_id=correlation_id)
        return _message(500, MSG_CREATE_FAILED)

    log_event(
        logger, "info", EVENT_POST_CREATED,
        post_id=record.id, author_id=record.author_id,
    )
    return ControllerResult(status_code=201, payload=to_post_response(record))


def list_posts(db: Session, query: PostListQuery) -> ControllerResult:
    """Return one page of posts, optionally restricted to a category."""
    category = query.category or None
    if category is not None and not is_valid_id(category):
        return _message(400, MSG_INVALID_CATEGORY_FILTER)

    try:
        page = _parse_positive_int(query.page, 1)
        limit = _parse_positive_int(query.limit, settings.default_page_size)
    except ValueError:
        return _message(400, MSG_INVALID_PAGINATION)
    limit = min(limit, settings.max_page_size)
    skip = (page - 1) * limit
    if skip > _MAX_OFFSET:
        return ControllerResult(status_code=200, payload=[])

    try:
        records = post_repository.find_posts(
            db, category_id=category, offset=skip, limit=limit,
        )
    except Exception as exc:
        normalize_db_error(
            exc, operation="list_posts",
            correlation_id=str(uuid.uuid4()), event_name=EVENT_DB_READ_FAILED,
        )
        return _message(500, MSG_LIST_FAILED)

    return ControllerResult(
        status_code=200, payload=[to_post_detail(r) for r in records],
    )


def get_post(db: Session, post_id: str) -> ControllerResult:
    """Return a single post with its author projection."""
    try:
        record = post_repository.find_post_by_id(db, post_id, with_author=True)
    except InvalidIdentifierError:
        return _message(404, MSG_NOT_FOUND)
    except Exception as exc:
        normalize_db_error(
            exc, operation="get_post",
            correlation_id=str(uuid.uuid4()), event_name=EVENT_DB_READ_FAILED,
        )
        return _message(500, MSG_GET_FAILED)

    if record is None:
        return _message(404, MSG_NOT_FOUND)
    return ControllerResult(status_code=200, payload=to_post_detail(record))


def update_post(
    db: Session,
    identity: Identity | None,
    post_id: str,
    body: PostUpdateBody,
) -> ControllerResult:
    """Merge the provided fields into a post owned by *identity*.

    A field that is omitted or empty keeps its stored value, so a title or
    content cannot be cleared through this operation.
    """
    correlation_id = str(uuid.uuid4())
    try:
        record = post_repository.find_post_by_id(db, post_id)
    except InvalidIdentifierError:
        return _message(404, MSG_NOT_FOUND)
    except Exception as exc:
        normalize_db_error(
            exc, operation="update_post",
            correlation_id=correlation_id, event_name=EVENT_DB_READ_FAILED,
        )
        return _message(400, MSG_UPDATE_FAILED)

    if record is None:
        return _message(404, MSG_NOT_FOUND)

    refusal = _authorize(identity, record, operation="update_post")
    if refusal is not None:
        return refusal

    if body.category and not is_valid_id(body.category):
        return _message(400, MSG_INVALID_CATEGORY_FORMAT)

    if body.title:
        record.title = body.title
    if body.content:
        record.content = body.content
    if body.category:
        record.category_id = body.category

    try:
        post_repository.save_post(db, record)
        db.commit()
    except PostValidationError as exc:
        db.rollback()
        return _error(400, str(exc))
    except Exception as exc:
        db.rollback()
        normalize_db_error(exc, operation="update_post", correlation_id=correlation_id)
        return _message(400, MSG_UPDATE_FAILED)

    log_event(logger, "info", EVENT_POST_UPDATED, post_id=record.id)
    return ControllerResult(status_code=200, payload=to_post_response(record))


def delete_post(
    db: Session,
    identity: Identity | None,
    post_id: str,
) -> ControllerResult:
    """Permanently remove a post owned by *identity*."""
    correlation_id = str(uuid.uuid4())
    try:
        record = post_repository.find_post_by_id(db, post_id)
    except InvalidIdentifierError:
        return _message(404, MSG_NOT_FOUND)
    except Exception as exc:
        normalize_db_error(
            exc, operation="delete_post",
            correlation_id=correlation_id, event_name=EVENT_DB_READ_FAILED,
        )
        return _message(500, MSG_DELETE_FAILED)

    if record is None:
        return _message(404, MSG_NOT_FOUND)

    refusal = _authorize(identity, record, operation="delete_post")
    if refusal is not None:
        return refusal

    try:
        post_repository.remove_post(db, record)
        db.commit()
    except Exception as exc:
        db.rollback()
        normalize_db_error(exc, operation="delete_post", correlation_id=correlation_id)
        return _message(500, MSG_DELETE_FAILED)

    log_event(logger, "info", EVENT_POST_DELETED, post_id=post_id)
    return _message(200, MSG_DELETED)
