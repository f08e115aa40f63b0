"""Vote coordination with toggle semantics."""

from __future__ import annotations

import logging

from roastr.core.errors import TransportError
from roastr.schemas import VoteType
from roastr.services.base import ViewerService
from roastr.services.notify import Messages

__all__ = ["VoteCoordinator"]

logger = logging.getLogger(__name__)


class VoteCoordinator(ViewerService):
    """Keeps at most one vote per (post, viewer)."""

    async def vote(self, post_id: str, vote_type: VoteType | str) -> VoteType | None:
        """Cast, switch or retract the viewer's vote on a post.

        Voting the same way twice retracts the vote; voting the other way
        overwrites it. The feed is re-aggregated afterwards.

        Returns:
            The viewer's vote after the call, or None if it was retracted.

        Raises:
            UnauthenticatedError: If there is no viewer.
            TransportError: If a backend call fails.
        """
        vote_type = VoteType(vote_type)
        viewer = self.require_viewer(Messages.LOGIN_TO_VOTE)

        try:
            existing = await self.backend.get_user_vote(post_id, viewer.id)
            if existing is None:
                await self.backend.upsert_vote(post_id, viewer.id, vote_type)
                result: VoteType | None = vote_type
            elif existing == vote_type:
                await self.backend.delete_vote(post_id, viewer.id)
                result = None
            else:
                await self.backend.upsert_vote(post_id, viewer.id, vote_type)
                result = vote_type
        except TransportError:
            logger.error("Error voting on post %s", post_id, exc_info=True)
            self.notifier.error(Messages.VOTE_FAILED)
            raise

        await self.refresh_feed()
        return result
