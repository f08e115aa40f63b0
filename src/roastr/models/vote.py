# src/roastr/models/vote.py
"""Models capturing voting interactions on posts."""

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from roastr.db.session import Base


class Vote(Base):
    """Per-user vote on a post."""

    __tablename__ = "votes"
    __table_args__ = (
        CheckConstraint("vote_type IN ('upvote', 'downvote')", name="ck_votes_vote_type"),
        Index("ix_votes_post_id", "post_id"),
    )

    # Composite primary key prevents duplicate votes from the same user.
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(36), primary_key=True)

    vote_type: Mapped[str] = mapped_column(String(16), nullable=False)
