"""SQLAlchemy ORM model for the users table.

Rows are owned by the authentication service; this API reads them to
resolve bearer tokens and to project post authors.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.db.base import Base
from backend.app.models.identifiers import ID_LENGTH, new_id


class UserRecord(Base):
    """An account that can author posts."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(ID_LENGTH), primary_key=True, default=new_id,
    )
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
