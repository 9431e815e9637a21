"""SQLAlchemy engine configuration for SQLite."""

import logging
from pathlib import Path

from sqlalchemy import create_engine, event, text

from backend.app.core.logging import EVENT_DB_INITIALIZED
from backend.app.core.settings import settings

logger = logging.getLogger(__name__)

# Ensure the parent directory exists so SQLite can create the file
_db_path = Path(settings.app_db_path)
_db_path.parent.mkdir(parents=True, exist_ok=True)


def get_resolved_db_path() -> Path:
    """Return the resolved absolute path to the SQLite database file."""
    return _db_path.resolve()


engine = create_engine(
    settings.database_url,
    echo=settings.debug,
    connect_args={"check_same_thread": False},  # required for SQLite
)


@event.listens_for(engine, "connect")
def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:  # type: ignore[no-untyped-def]
    # posts.author_id references users.id; SQLite ignores FKs unless asked.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


logger.info(
    "%s: path=%s url=%s",
    EVENT_DB_INITIALIZED,
    get_resolved_db_path(),
    settings.database_url,
)


class DatabaseInitError(Exception):
    """Raised when the database cannot be initialized."""


def init_db() -> None:
    """Verify the database is accessible by executing a simple query.

    Called at startup to confirm the DB file can be created/opened.
    Raises :class:`DatabaseInitError` with actionable guidance on failure.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("db_init_verified: path=%s", get_resolved_db_path())
    except Exception as exc:
        msg = (
            f"Cannot open database at '{get_resolved_db_path()}': {exc}. "
            f"Check file permissions or set APP_DB_PATH to a writable location."
        )
        logger.error("db_init_failed: %s", msg)
        raise DatabaseInitError(msg) from exc
