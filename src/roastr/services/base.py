"""Shared plumbing for services acting on behalf of the current viewer."""

from __future__ import annotations

from roastr.backend.base import RoastrBackend
from roastr.core.errors import UnauthenticatedError
from roastr.schemas import Viewer
from roastr.services.feed import FeedCache
from roastr.services.identity import IdentityProvider
from roastr.services.notify import Notifier


class ViewerService:
    """Base class wiring the backend, identity, notifications and feed cache."""

    def __init__(
        self,
        backend: RoastrBackend,
        identity: IdentityProvider,
        notifier: Notifier,
        feeds: FeedCache,
    ) -> None:
        self.backend = backend
        self.identity = identity
        self.notifier = notifier
        self.feeds = feeds

    @property
    def viewer(self) -> Viewer | None:
        return self.identity.current_viewer()

    def require_viewer(self, prompt: str) -> Viewer:
        """Return the viewer, or prompt the user to log in and raise."""
        viewer = self.viewer
        if viewer is None:
            self.notifier.error(prompt)
            raise UnauthenticatedError(prompt)
        return viewer

    async def refresh_feed(self) -> None:
        """Invalidate every cached feed and re-aggregate the viewer's."""
        self.feeds.invalidate()
        await self.feeds.load(self.viewer, self.notifier)
