"""SQLAlchemy implementation of the Roastr backend contract."""
from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from sqlalchemy import case, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from roastr.core.errors import TransportError
from roastr.db.session import SessionLocal
from roastr.models import (
    POST_STATUS_VISIBLE,
    Post,
    Profile,
    Report,
    SavedPost,
    Tag,
    Vote,
    post_tags,
)
from roastr.schemas import PostRecord, PostStatus, PostTagLink, VoteTally, VoteType
from roastr.schemas import Profile as ProfileOut
from roastr.schemas import Tag as TagOut

__all__ = ["SqlBackend"]

logger = logging.getLogger(__name__)


def _to_record(post: Post) -> PostRecord:
    return PostRecord(
        id=post.id,
        content=post.content,
        created_at=post.created_at,
        author_id=post.user_id,
        is_anonymous=post.is_anonymous,
        status=PostStatus(post.status),
        tags=[TagOut.model_validate(tag) for tag in post.tags],
    )


class SqlBackend:
    """Thin wrapper around database access for the Roastr tables."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        """Initialize the backend with a session factory.

        Args:
            session_factory: Factory producing sessions; defaults to the
                application-wide ``SessionLocal``.
        """
        self._session_factory = session_factory or SessionLocal

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            raise TransportError(f"Database request failed: {exc}") from exc
        finally:
            db.close()

    async def list_visible_posts(self) -> list[PostRecord]:
        with self._session() as db:
            result = db.execute(
                select(Post)
                .where(Post.status == POST_STATUS_VISIBLE)
                .order_by(Post.created_at.desc())
            )
            return [_to_record(post) for post in result.scalars()]

    async def list_saved_posts(self, user_id: str) -> list[PostRecord]:
        with self._session() as db:
            result = db.execute(
                select(Post)
                .join(SavedPost, SavedPost.post_id == Post.id)
                .where(SavedPost.user_id == user_id, Post.status == POST_STATUS_VISIBLE)
                .order_by(SavedPost.created_at.desc())
            )
            return [_to_record(post) for post in result.scalars()]

    async def get_vote_tally(self, post_id: str) -> VoteTally | None:
        upvotes = func.coalesce(
            func.sum(case((Vote.vote_type == VoteType.UPVOTE.value, 1), else_=0)), 0
        )
        downvotes = func.coalesce(
            func.sum(case((Vote.vote_type == VoteType.DOWNVOTE.value, 1), else_=0)), 0
        )
        with self._session() as db:
            row = db.execute(select(upvotes, downvotes).where(Vote.post_id == post_id)).one()
            return VoteTally(upvotes=int(row[0]), downvotes=int(row[1]))

    async def get_user_vote(self, post_id: str, user_id: str) -> VoteType | None:
        with self._session() as db:
            vote = db.get(Vote, (post_id, user_id))
            if vote is None:
                return None
            return VoteType(vote.vote_type)

    async def get_save_status(self, post_id: str, user_id: str) -> bool:
        with self._session() as db:
            return db.get(SavedPost, (post_id, user_id)) is not None

    async def get_profile(self, user_id: str) -> ProfileOut | None:
        with self._session() as db:
            profile = db.get(Profile, user_id)
            if profile is None:
                return None
            return ProfileOut(user_id=profile.id, username=profile.username)

    async def insert_post(
        self,
        *,
        content: str,
        author_id: str | None,
        is_anonymous: bool,
    ) -> PostRecord:
        with self._session() as db:
            post = Post(content=content, user_id=author_id, is_anonymous=is_anonymous)
            db.add(post)
            db.commit()
            db.refresh(post)
            return PostRecord(
                id=post.id,
                content=post.content,
                created_at=post.created_at,
                author_id=post.user_id,
                is_anonymous=post.is_anonymous,
                status=PostStatus(post.status),
            )

    async def insert_post_tags(self, links: Sequence[PostTagLink]) -> None:
        if not links:
            return
        with self._session() as db:
            db.execute(
                insert(post_tags),
                [{"post_id": link.post_id, "tag_id": link.tag_id} for link in links],
            )
            db.commit()

    async def update_post_status(
        self,
        post_id: str,
        status: PostStatus,
        *,
        author_id: str | None = None,
    ) -> bool:
        stmt = update(Post).where(Post.id == post_id)
        if author_id is not None:
            stmt = stmt.where(Post.user_id == author_id)
        with self._session() as db:
            result = db.execute(stmt.values(status=status.value))
            db.commit()
            return bool(result.rowcount)

    async def upsert_vote(self, post_id: str, user_id: str, vote_type: VoteType) -> None:
        with self._session() as db:
            vote = db.get(Vote, (post_id, user_id))
            if vote is None:
                db.add(Vote(post_id=post_id, user_id=user_id, vote_type=vote_type.value))
            else:
                vote.vote_type = vote_type.value
            db.commit()

    async def delete_vote(self, post_id: str, user_id: str) -> None:
        with self._session() as db:
            vote = db.get(Vote, (post_id, user_id))
            if vote is not None:
                db.delete(vote)
                db.commit()

    async def upsert_save(self, post_id: str, user_id: str) -> None:
        with self._session() as db:
            if db.get(SavedPost, (post_id, user_id)) is None:
                db.add(SavedPost(post_id=post_id, user_id=user_id))
                db.commit()

    async def delete_save(self, post_id: str, user_id: str) -> None:
        with self._session() as db:
            saved = db.get(SavedPost, (post_id, user_id))
            if saved is not None:
                db.delete(saved)
                db.commit()

    async def insert_report(
        self,
        *,
        post_id: str,
        user_id: str | None,
        anonymous_marker: str | None,
    ) -> None:
        with self._session() as db:
            db.add(Report(post_id=post_id, user_id=user_id, anonymous_marker=anonymous_marker))
            db.commit()

    async def list_tags(self) -> list[TagOut]:
        with self._session() as db:
            result = db.execute(select(Tag).order_by(Tag.name))
            return [TagOut.model_validate(tag) for tag in result.scalars()]

    async def upsert_profile(self, user_id: str, username: str) -> ProfileOut:
        with self._session() as db:
            profile = db.get(Profile, user_id)
            if profile is None:
                profile = Profile(id=user_id, username=username)
                db.add(profile)
            else:
                profile.username = username
            db.commit()
            logger.debug("Upserted profile for %s", user_id)
            return ProfileOut(user_id=user_id, username=username)

    async def close(self) -> None:
        """Nothing to release; sessions are closed per call."""
