"""Data contract between the Roastr front-end and its managed backend.

Every durable record lives behind this contract. Implementations must raise
:class:`roastr.core.errors.TransportError` when the underlying call fails and
must report absent rows as ``None``/``False`` rather than raising.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from roastr.schemas import PostRecord, PostStatus, PostTagLink, Profile, Tag, VoteTally, VoteType

__all__ = ["RoastrBackend"]


class RoastrBackend(Protocol):
    """Query/RPC surface consumed by the Roastr services."""

    async def list_visible_posts(self) -> list[PostRecord]:
        """Return visible posts with their tags, newest first."""
        ...

    async def list_saved_posts(self, user_id: str) -> list[PostRecord]:
        """Return the visible posts saved by ``user_id``, most recently saved first."""
        ...

    async def get_vote_tally(self, post_id: str) -> VoteTally | None:
        """Return the aggregate vote counts for a post."""
        ...

    async def get_user_vote(self, post_id: str, user_id: str) -> VoteType | None:
        ...

    async def get_save_status(self, post_id: str, user_id: str) -> bool:
        ...

    async def get_profile(self, user_id: str) -> Profile | None:
        ...

    async def insert_post(
        self,
        *,
        content: str,
        author_id: str | None,
        is_anonymous: bool,
    ) -> PostRecord:
        """Insert a post row and return it without tags."""
        ...

    async def insert_post_tags(self, links: Sequence[PostTagLink]) -> None:
        ...

    async def update_post_status(
        self,
        post_id: str,
        status: PostStatus,
        *,
        author_id: str | None = None,
    ) -> bool:
        """Change a post's status, restricted to ``author_id`` when given.

        Returns:
            True if a row was updated.
        """
        ...

    async def upsert_vote(self, post_id: str, user_id: str, vote_type: VoteType) -> None:
        ...

    async def delete_vote(self, post_id: str, user_id: str) -> None:
        ...

    async def upsert_save(self, post_id: str, user_id: str) -> None:
        ...

    async def delete_save(self, post_id: str, user_id: str) -> None:
        ...

    async def insert_report(
        self,
        *,
        post_id: str,
        user_id: str | None,
        anonymous_marker: str | None,
    ) -> None:
        ...

    async def list_tags(self) -> list[Tag]:
        """Return the whole tag catalog ordered by name."""
        ...

    async def upsert_profile(self, user_id: str, username: str) -> Profile:
        ...

    async def close(self) -> None:
        """Release any held connections."""
        ...
