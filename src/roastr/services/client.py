"""Session facade over every Roastr service for a single viewer."""

from __future__ import annotations

import logging
from collections.abc import Collection

from pydantic import ValidationError

from roastr.backend.base import RoastrBackend
from roastr.core.errors import TransportError, UnauthenticatedError
from roastr.schemas import FeedItem, PostRecord, Profile, Tag, Viewer, VoteType
from roastr.services.authoring import PostAuthoring
from roastr.services.feed import FeedCache, aggregate_library
from roastr.services.feed_view import SortKey, apply_view
from roastr.services.identity import IdentityProvider, StaticIdentity
from roastr.services.notify import CollectingNotifier, Messages, Notifier
from roastr.services.profiles import ProfileService
from roastr.services.reports import ReportSubmission
from roastr.services.saves import SaveCoordinator
from roastr.services.tags import TagCatalog
from roastr.services.votes import VoteCoordinator

__all__ = ["RoastrClient"]

logger = logging.getLogger(__name__)


class RoastrClient:
    """Everything the front-end can do, bound to one identity and notifier.

    The backend, feed cache and tag catalog may be shared between clients;
    the notifier collects the messages raised on behalf of this client.
    """

    def __init__(
        self,
        backend: RoastrBackend,
        *,
        identity: IdentityProvider | None = None,
        notifier: Notifier | None = None,
        feeds: FeedCache | None = None,
        catalog: TagCatalog | None = None,
    ) -> None:
        self.backend = backend
        self.identity = identity or StaticIdentity()
        self.notifier = notifier or CollectingNotifier()
        self.feeds = feeds or FeedCache(backend)
        self.catalog = catalog or TagCatalog(backend)

        services = (self.backend, self.identity, self.notifier, self.feeds)
        self.votes = VoteCoordinator(*services)
        self.saves = SaveCoordinator(*services)
        self.reports = ReportSubmission(*services)
        self.profiles = ProfileService(*services)
        self.authoring = PostAuthoring(*services, self.catalog)

    @property
    def viewer(self) -> Viewer | None:
        return self.identity.current_viewer()

    @property
    def posts(self) -> list[FeedItem]:
        return self.feeds.feed_for(self.viewer).items

    @property
    def loading(self) -> bool:
        return self.feeds.feed_for(self.viewer).loading

    async def tags(self) -> tuple[Tag, ...]:
        return await self.catalog.load()

    async def feed(
        self,
        selected_tags: Collection[str] = (),
        sort_key: SortKey | str = SortKey.NEWEST,
        *,
        refresh: bool = False,
    ) -> list[FeedItem]:
        """Return the viewer's feed filtered and sorted for display."""
        items = await self.feeds.load(self.viewer, self.notifier, force=refresh)
        return apply_view(items, selected_tags, sort_key)

    async def refresh_posts(self) -> list[FeedItem]:
        return await self.feeds.load(self.viewer, self.notifier, force=True)

    async def library(self) -> list[FeedItem]:
        """Return the viewer's saved posts.

        Failures are logged and the previously loaded library is returned. The
        last result is kept on the shared feed cache, so it survives across
        clients built for the same viewer.
        """
        viewer = self.viewer
        if viewer is None:
            self.notifier.error(Messages.LOGIN_FOR_LIBRARY)
            raise UnauthenticatedError(Messages.LOGIN_FOR_LIBRARY)
        feed = self.feeds.feed_for(viewer)
        try:
            feed.library = await aggregate_library(self.backend, viewer)
        except (TransportError, ValidationError):
            logger.error("Error fetching saved posts for %s", viewer.id, exc_info=True)
        return feed.library

    async def create_post(
        self,
        content: str,
        tag_names: Collection[str],
        is_anonymous: bool = False,
    ) -> PostRecord:
        return await self.authoring.create_post(content, tag_names, is_anonymous)

    async def delete_post(self, post_id: str) -> None:
        await self.authoring.delete_post(post_id)

    async def vote(self, post_id: str, vote_type: VoteType | str) -> VoteType | None:
        return await self.votes.vote(post_id, vote_type)

    async def toggle_save(self, post_id: str) -> bool:
        return await self.saves.toggle_save(post_id)

    async def report_post(self, post_id: str) -> None:
        await self.reports.report_post(post_id)

    async def profile(self) -> str:
        return await self.profiles.fetch()

    async def update_profile(self, username: str) -> Profile:
        return await self.profiles.update(username)

    async def sign_out(self) -> None:
        """End the session; the next feed load is for an anonymous visitor."""
        viewer = self.viewer
        if viewer is not None:
            self.feeds.feed_for(viewer).library = []
        await self.identity.sign_out()
        await self.feeds.load(self.viewer, self.notifier)
