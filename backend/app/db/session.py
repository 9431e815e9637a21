"""Database session factory."""

from collections.abc import Generator

from sqlalchemy.orm import Session, sessionmaker

from backend.app.db.engine import engine

SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session.

    The post controller commits or rolls back; anything left open is
    discarded when the session closes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
