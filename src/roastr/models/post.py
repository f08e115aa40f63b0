# src/roastr/models/post.py
"""SQLAlchemy models for posts and their tag associations."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from roastr.db.session import Base
from roastr.db.time import new_uuid, utcnow

if TYPE_CHECKING:
    from .tag import Tag

POST_STATUS_VISIBLE = "visible"
POST_STATUS_DELETED = "deleted"

post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", String(36), ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Post(Base):
    """A roast, joke or insult shared to the public feed."""

    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint("status IN ('visible', 'deleted')", name="ck_posts_status"),
        Index("ix_posts_status_created_at", "status", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # Null when posted anonymously.
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=POST_STATUS_VISIBLE)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    tags: Mapped[list[Tag]] = relationship(
        "Tag",
        secondary=post_tags,
        lazy="selectin",
        order_by="Tag.name",
    )
