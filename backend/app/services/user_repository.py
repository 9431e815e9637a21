"""Read access to user accounts, plus creation for seeding."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from backend.app.models.identifiers import is_valid_id
from backend.app.models.user_record import UserRecord
from backend.app.db.errors import handle_operational_error

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def create_user(db: Session, *, username: str, email: str) -> UserRecord:
    """Insert a user and flush to obtain an id."""
    username = (username or "").strip()
    if not username:
        raise ValueError("username must be non-empty")

    record = UserRecord(
        username=username,
        email=normalize_email(email),
        created_at=datetime.now(UTC),
    )
    db.add(record)
    try:
        db.flush()
    except OperationalError as exc:
        handle_operational_error(exc, "create_user")
    logger.info("user_record_created: id=%s", record.id)
    return record


def get_user_by_id(db: Session, user_id: str) -> UserRecord | None:
    """Fetch a user by id. Malformed ids resolve to ``None``."""
    if not is_valid_id(user_id):
        return None
    return db.get(UserRecord, user_id)
