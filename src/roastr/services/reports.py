"""Moderation report submission."""

from __future__ import annotations

import logging
import time

from roastr.core.errors import TransportError
from roastr.services.base import ViewerService
from roastr.services.notify import Messages

__all__ = ["ReportSubmission", "anonymous_marker"]

logger = logging.getLogger(__name__)


def anonymous_marker() -> str:
    """Return a time-based marker for an unauthenticated reporter.

    Two reports from the same visitor get different markers; this is not a
    deduplication key.
    """
    return f"anonymous_{int(time.time() * 1000)}"


class ReportSubmission(ViewerService):
    """Files reports; works with or without a viewer."""

    async def report_post(self, post_id: str) -> None:
        viewer = self.viewer
        try:
            await self.backend.insert_report(
                post_id=post_id,
                user_id=viewer.id if viewer else None,
                anonymous_marker=None if viewer else anonymous_marker(),
            )
        except TransportError:
            logger.error("Error reporting post %s", post_id, exc_info=True)
            self.notifier.error(Messages.REPORT_FAILED)
            raise

        # Reports do not change anything the feed shows.
        self.notifier.success(Messages.REPORTED)
