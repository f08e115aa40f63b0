"""Save (bookmark) toggling."""

from __future__ import annotations

import logging

from roastr.core.errors import TransportError
from roastr.services.base import ViewerService
from roastr.services.notify import Messages

__all__ = ["SaveCoordinator"]

logger = logging.getLogger(__name__)


class SaveCoordinator(ViewerService):
    """Adds or removes a post from the viewer's library."""

    async def toggle_save(self, post_id: str) -> bool:
        """Flip the save state of a post and return the new state."""
        viewer = self.require_viewer(Messages.LOGIN_TO_SAVE)

        try:
            if await self.backend.get_save_status(post_id, viewer.id):
                await self.backend.delete_save(post_id, viewer.id)
                saved = False
            else:
                await self.backend.upsert_save(post_id, viewer.id)
                saved = True
        except TransportError:
            logger.error("Error saving post %s", post_id, exc_info=True)
            self.notifier.error(Messages.SAVE_FAILED)
            raise

        self.notifier.success(Messages.SAVED if saved else Messages.UNSAVED)
        await self.refresh_feed()
        return saved
