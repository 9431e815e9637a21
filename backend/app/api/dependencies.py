"""Bearer-token dependencies that resolve the caller's :class:`Identity`."""

from __future__ import annotations

import logging

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from backend.app.core import security
from backend.app.core.logging import EVENT_AUTH_FAILED, log_event
from backend.app.db.session import get_db
from backend.app.services.post_controller import Identity
from backend.app.services.user_repository import get_user_by_id

logger = logging.getLogger(__name__)


class NotAuthenticatedError(Exception):
    """Raised when a request carries missing or unusable credentials.

    Rendered as ``401 {"message": ...}`` by the handler in ``main``.
    """


def _extract_bearer_token(authorization: str) -> str:
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2:
        raise NotAuthenticatedError("Not authorized, invalid Authorization header")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise NotAuthenticatedError("Not authorized, expected Bearer token")
    return token


def _resolve_identity(authorization: str, db: Session) -> Identity:
    token = _extract_bearer_token(authorization)
    try:
        user_id = security.subject_from_token(token)
    except security.AuthSecurityError as exc:
        log_event(logger, "warning", EVENT_AUTH_FAILED, reason=str(exc))
        raise NotAuthenticatedError("Not authorized, token failed") from exc

    user = get_user_by_id(db, user_id)
    if user is None:
        log_event(logger, "warning", EVENT_AUTH_FAILED, reason="unknown_user")
        raise NotAuthenticatedError("Not authorized, user not found")
    return Identity(user_id=user.id, username=user.username)


def get_optional_identity(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> Identity | None:
    """Identity of the caller, or ``None`` when no credentials were sent."""
    if not (authorization or "").strip():
        return None
    return _resolve_identity(authorization, db)


def require_identity(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> Identity:
    """Identity of the caller; anonymous requests are rejected."""
    if not (authorization or "").strip():
        raise NotAuthenticatedError("Not authorized, no token")
    return _resolve_identity(authorization, db)
