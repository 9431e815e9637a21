"""SQLAlchemy ORM model for the posts table."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.db.base import Base
from backend.app.models.identifiers import ID_LENGTH, new_id
from backend.app.models.user_record import UserRecord

TITLE_MAX_LENGTH = 200


class PostRecord(Base):
    """A post owned by the user who created it."""

    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_category_id", "category_id"),
        Index("ix_posts_author_id", "author_id"),
        Index("ix_posts_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(ID_LENGTH), primary_key=True, default=new_id,
    )
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # Categories live elsewhere; only the reference shape is checked.
    category_id: Mapped[str | None] = mapped_column(
        String(ID_LENGTH), nullable=True,
    )
    author_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("users.id"), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    author: Mapped[UserRecord | None] = relationship(UserRecord, lazy="select")
