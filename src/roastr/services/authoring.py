"""Post authoring: validation, submission and owner soft-delete."""

from __future__ import annotations

import logging
from collections.abc import Collection

from roastr.backend.base import RoastrBackend
from roastr.core.errors import NotPermittedError, TransportError, ValidationFailedError
from roastr.core.settings import settings
from roastr.schemas import PostRecord, PostStatus, PostTagLink
from roastr.services.base import ViewerService
from roastr.services.feed import FeedCache
from roastr.services.identity import IdentityProvider
from roastr.services.notify import Messages, Notifier
from roastr.services.tags import TagCatalog

__all__ = ["PostAuthoring", "validate_post_draft"]

logger = logging.getLogger(__name__)

RULE_CONTENT_EMPTY = "content_empty"
RULE_TAGS_EMPTY = "tags_empty"
RULE_CONTENT_TOO_LONG = "content_too_long"


def validate_post_draft(
    content: str,
    tag_names: Collection[str],
    *,
    max_length: int = settings.post_max_length,
) -> str:
    """Check a draft before anything is sent to the backend.

    Rules are checked in order and the first violation wins: content must not
    be blank, at least one tag must be selected, and the content may hold at
    most ``max_length`` characters.

    Returns:
        The content with surrounding whitespace removed.

    Raises:
        ValidationFailedError: With the code of the violated rule.
    """
    trimmed = content.strip()
    if not trimmed:
        raise ValidationFailedError(RULE_CONTENT_EMPTY, Messages.CONTENT_EMPTY)
    if not tag_names:
        raise ValidationFailedError(RULE_TAGS_EMPTY, Messages.TAGS_EMPTY)
    if len(content) > max_length:
        raise ValidationFailedError(
            RULE_CONTENT_TOO_LONG,
            Messages.CONTENT_TOO_LONG.format(limit=max_length),
        )
    return trimmed


class PostAuthoring(ViewerService):
    """Creates posts and lets authors soft-delete their own."""

    def __init__(
        self,
        backend: RoastrBackend,
        identity: IdentityProvider,
        notifier: Notifier,
        feeds: FeedCache,
        catalog: TagCatalog,
        *,
        max_length: int | None = None,
    ) -> None:
        super().__init__(backend, identity, notifier, feeds)
        self.catalog = catalog
        self.max_length = settings.post_max_length if max_length is None else max_length

    async def create_post(
        self,
        content: str,
        tag_names: Collection[str],
        is_anonymous: bool = False,
    ) -> PostRecord:
        """Validate and submit a new post.

        The author id is left empty for anonymous posts and for visitors
        without a viewer identity.

        Raises:
            ValidationFailedError: If the draft breaks a rule; nothing is sent.
            TransportError: If the backend rejects the post or its tags.
        """
        try:
            trimmed = validate_post_draft(content, tag_names, max_length=self.max_length)
        except ValidationFailedError as exc:
            self.notifier.error(exc.message)
            raise

        await self.catalog.load()
        if not self.catalog.loaded:
            self.notifier.error(Messages.POST_FAILED)
            raise TransportError("Tag catalog is unavailable")

        tags = self.catalog.resolve(tag_names)
        if not tags:
            self.notifier.error(Messages.TAGS_EMPTY)
            raise ValidationFailedError(RULE_TAGS_EMPTY, Messages.TAGS_EMPTY)

        viewer = self.viewer
        author_id = None if is_anonymous or viewer is None else viewer.id

        try:
            post = await self.backend.insert_post(
                content=trimmed,
                author_id=author_id,
                is_anonymous=is_anonymous,
            )
        except TransportError:
            logger.error("Error creating post", exc_info=True)
            self.notifier.error(Messages.POST_FAILED)
            raise

        try:
            await self.backend.insert_post_tags(
                [PostTagLink(post_id=post.id, tag_id=tag.id) for tag in tags]
            )
        except TransportError:
            logger.error("Error tagging post %s; hiding it", post.id, exc_info=True)
            await self._hide_orphan(post.id)
            self.notifier.error(Messages.POST_FAILED)
            raise

        post = post.model_copy(update={"tags": tags})
        await self.refresh_feed()
        self.notifier.success(Messages.POST_CREATED)
        return post

    async def _hide_orphan(self, post_id: str) -> None:
        try:
            await self.backend.update_post_status(post_id, PostStatus.DELETED)
        except TransportError:
            logger.error("Could not hide untagged post %s", post_id, exc_info=True)

    async def delete_post(self, post_id: str) -> None:
        """Soft-delete a post owned by the viewer.

        Raises:
            UnauthenticatedError: If there is no viewer.
            NotPermittedError: If the viewer is not the post's author.
            TransportError: If the backend call fails.
        """
        viewer = self.require_viewer(Messages.LOGIN_TO_DELETE)

        try:
            updated = await self.backend.update_post_status(
                post_id,
                PostStatus.DELETED,
                author_id=viewer.id,
            )
        except TransportError:
            logger.error("Error deleting post %s", post_id, exc_info=True)
            self.notifier.error(Messages.DELETE_FAILED)
            raise

        if not updated:
            self.notifier.error(Messages.NOT_OWNER)
            raise NotPermittedError(Messages.NOT_OWNER)

        self.notifier.success(Messages.POST_DELETED)
        await self.refresh_feed()
