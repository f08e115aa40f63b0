# src/roastr/models/tag.py
"""Tag reference data."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from roastr.db.session import Base
from roastr.db.time import new_uuid


class Tag(Base):
    """Classification label attached to posts; immutable once seeded."""

    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    emoji: Mapped[str] = mapped_column(Text, nullable=False)
    # Sensitive tags mark content as NSFW.
    is_sensitive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
