"""SQLite operational-error categorization shared by the repositories."""

import logging

from sqlalchemy.exc import OperationalError

logger = logging.getLogger(__name__)


class DatabaseLockedError(Exception):
    """Raised when the database is locked by another process (retryable)."""


def handle_operational_error(exc: OperationalError, operation: str) -> None:
    """Raise :class:`DatabaseLockedError` for locked/busy errors, else re-raise *exc*."""
    msg = str(exc).lower()
    if "locked" in msg or "busy" in msg:
        logger.warning(
            "db_write_failed: operation=%s reason=database_locked (retryable)",
            operation,
        )
        raise DatabaseLockedError(
            f"Database is locked during '{operation}'. "
            f"Another process may be writing. Please retry."
        ) from exc
    raise exc
