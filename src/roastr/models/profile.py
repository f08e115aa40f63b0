# src/roastr/models/profile.py
"""Public profile attached to an authenticated identity."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from roastr.db.session import Base


class Profile(Base):
    """Display name for an identity; the primary key is the identity id."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    username: Mapped[str] = mapped_column(Text, nullable=False)
