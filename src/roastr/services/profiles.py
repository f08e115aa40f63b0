"""Viewer profile lookup and update."""

from __future__ import annotations

import logging

from roastr.core.errors import TransportError, ValidationFailedError
from roastr.schemas import Profile
from roastr.services.base import ViewerService
from roastr.services.notify import Messages

__all__ = ["ProfileService"]

logger = logging.getLogger(__name__)

RULE_USERNAME_EMPTY = "username_empty"


class ProfileService(ViewerService):
    """Reads and upserts the viewer's own profile."""

    async def fetch(self) -> str:
        """Return the viewer's username, or "" when no profile exists yet."""
        viewer = self.require_viewer(Messages.LOGIN_FOR_PROFILE)
        try:
            profile = await self.backend.get_profile(viewer.id)
        except TransportError:
            logger.error("Error fetching profile for %s", viewer.id, exc_info=True)
            return ""
        return profile.username if profile else ""

    async def update(self, username: str) -> Profile:
        viewer = self.require_viewer(Messages.LOGIN_FOR_PROFILE)
        trimmed = username.strip()
        if not trimmed:
            self.notifier.error(Messages.USERNAME_EMPTY)
            raise ValidationFailedError(RULE_USERNAME_EMPTY, Messages.USERNAME_EMPTY)

        try:
            profile = await self.backend.upsert_profile(viewer.id, trimmed)
        except TransportError:
            logger.error("Error updating profile for %s", viewer.id, exc_info=True)
            self.notifier.error(Messages.PROFILE_FAILED)
            raise

        self.notifier.success(Messages.PROFILE_UPDATED)
        # Author names on the feed come from profiles.
        self.feeds.invalidate()
        return profile
