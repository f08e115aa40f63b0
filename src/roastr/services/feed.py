"""Feed aggregation and the viewer-scoped feed cache.

A feed is always rebuilt from scratch: every visible post is joined with its
vote tally, the viewer's own vote, the viewer's save status and the author's
display name. Writes never patch a cached feed in place; they invalidate the
whole cache and the next load re-aggregates.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import TypeVar

from pydantic import ValidationError

from roastr.backend.base import RoastrBackend
from roastr.core.errors import TransportError
from roastr.schemas import FeedItem, PostRecord, Viewer
from roastr.services.notify import Messages, Notifier

__all__ = [
    "ANONYMOUS_USERNAME",
    "UNKNOWN_USERNAME",
    "FeedCache",
    "PostFeed",
    "aggregate_feed",
    "aggregate_library",
    "build_feed_item",
    "resolve_username",
]

logger = logging.getLogger(__name__)

ANONYMOUS_USERNAME = "Anonymous"
UNKNOWN_USERNAME = "Unknown"

T = TypeVar("T")


async def _resolved(value: T) -> T:
    return value


async def resolve_username(backend: RoastrBackend, post: PostRecord) -> str:
    """Return the name shown as the post's author.

    Anonymous posts and posts without an author id show "Anonymous". An author
    id without a matching profile shows "Unknown".
    """
    if post.is_anonymous or not post.author_id:
        return ANONYMOUS_USERNAME
    profile = await backend.get_profile(post.author_id)
    if profile is None:
        return UNKNOWN_USERNAME
    return profile.username


async def build_feed_item(
    backend: RoastrBackend,
    post: PostRecord,
    viewer: Viewer | None,
    *,
    is_saved: bool | None = None,
) -> FeedItem:
    """Resolve every per-post lookup concurrently and combine them.

    Args:
        backend: Data source.
        post: Post row joined with its tags.
        viewer: Current viewer; own-vote and save lookups are skipped without one.
        is_saved: Known save status, skipping the save lookup when given.
    """
    if viewer is None:
        user_vote_lookup = _resolved(None)
        saved_lookup = _resolved(False)
    else:
        user_vote_lookup = backend.get_user_vote(post.id, viewer.id)
        saved_lookup = (
            _resolved(is_saved)
            if is_saved is not None
            else backend.get_save_status(post.id, viewer.id)
        )

    tally, user_vote, saved, username = await asyncio.gather(
        backend.get_vote_tally(post.id),
        user_vote_lookup,
        saved_lookup,
        resolve_username(backend, post),
    )

    return FeedItem(
        id=post.id,
        content=post.content,
        tags=list(post.tags),
        upvotes=tally.upvotes if tally else 0,
        downvotes=tally.downvotes if tally else 0,
        username=username,
        is_anonymous=post.is_anonymous,
        created_at=post.created_at,
        is_nsfw=any(tag.is_sensitive for tag in post.tags),
        user_vote=user_vote,
        is_saved=bool(saved),
    )


async def aggregate_feed(backend: RoastrBackend, viewer: Viewer | None) -> list[FeedItem]:
    """Build the feed of visible posts in the order the backend returned them."""
    posts = await backend.list_visible_posts()
    return list(await asyncio.gather(*(build_feed_item(backend, post, viewer) for post in posts)))


async def aggregate_library(backend: RoastrBackend, viewer: Viewer) -> list[FeedItem]:
    """Build FeedItems for the posts ``viewer`` has saved."""
    posts = await backend.list_saved_posts(viewer.id)
    return list(
        await asyncio.gather(
            *(build_feed_item(backend, post, viewer, is_saved=True) for post in posts)
        )
    )


class PostFeed:
    """The feed held for one viewer.

    Each refresh takes a new generation number. A refresh that completes after
    a newer one has started is discarded, so a slow stale response cannot
    overwrite a fresher feed.
    """

    def __init__(self, backend: RoastrBackend, viewer: Viewer | None) -> None:
        self._backend = backend
        self.viewer = viewer
        self.items: list[FeedItem] = []
        # Last saved-post list loaded for this viewer.
        self.library: list[FeedItem] = []
        self.loading = False
        self.stale = True
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> None:
        self.stale = True

    async def refresh(self, notifier: Notifier) -> list[FeedItem]:
        """Re-aggregate the feed and replace ``items`` wholesale.

        On failure the previously held items are kept and a single
        notification is raised.
        """
        self._generation += 1
        generation = self._generation
        self.loading = True
        try:
            items = await aggregate_feed(self._backend, self.viewer)
        except (TransportError, ValidationError) as exc:
            if generation != self._generation:
                logger.info("Superseded feed generation %d failed: %s", generation, exc)
                return self.items
            logger.error("Error fetching posts: %s", exc, exc_info=True)
            notifier.error(Messages.FEED_LOAD_FAILED)
            self.loading = False
            return self.items

        if generation != self._generation:
            logger.debug(
                "Discarding feed generation %d; generation %d is newer",
                generation,
                self._generation,
            )
            return self.items

        self.items = items
        self.stale = False
        self.loading = False
        return items


class FeedCache:
    """Feeds keyed by viewer, invalidated wholesale by any write."""

    def __init__(self, backend: RoastrBackend, *, max_viewers: int = 1024) -> None:
        self._backend = backend
        self._max_viewers = max_viewers
        self._feeds: OrderedDict[str | None, PostFeed] = OrderedDict()

    @staticmethod
    def key_for(viewer: Viewer | None) -> str | None:
        return viewer.id if viewer is not None else None

    def feed_for(self, viewer: Viewer | None) -> PostFeed:
        """Return the feed for ``viewer``, creating an empty stale one if needed."""
        key = self.key_for(viewer)
        feed = self._feeds.get(key)
        if feed is None:
            feed = PostFeed(self._backend, viewer)
            self._feeds[key] = feed
            while len(self._feeds) > self._max_viewers:
                self._feeds.popitem(last=False)
        else:
            self._feeds.move_to_end(key)
        return feed

    async def load(
        self,
        viewer: Viewer | None,
        notifier: Notifier,
        *,
        force: bool = False,
    ) -> list[FeedItem]:
        """Return the viewer's feed, re-aggregating it when stale or forced."""
        feed = self.feed_for(viewer)
        if force or feed.stale:
            return await feed.refresh(notifier)
        return feed.items

    def invalidate(self) -> None:
        """Mark every cached feed stale."""
        for feed in self._feeds.values():
            feed.invalidate()

    def __len__(self) -> int:
        return len(self._feeds)
