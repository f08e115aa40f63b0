"""User-facing notification side channel."""

from __future__ import annotations

import logging
from typing import Protocol

from roastr.schemas import Notification

__all__ = ["CollectingNotifier", "Messages", "Notifier"]

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Anything that can show a short message to the user."""

    def success(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class CollectingNotifier:
    """Records notifications in the order they were raised."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def success(self, message: str) -> None:
        logger.info("notify success: %s", message)
        self.notifications.append(Notification(level="success", message=message))

    def error(self, message: str) -> None:
        logger.warning("notify error: %s", message)
        self.notifications.append(Notification(level="error", message=message))

    @property
    def messages(self) -> list[str]:
        return [notification.message for notification in self.notifications]


class Messages:
    """Text of every notification the services raise."""

    FEED_LOAD_FAILED = "Failed to load posts"

    LOGIN_TO_VOTE = "Please log in to vote"
    VOTE_FAILED = "Failed to vote"

    LOGIN_TO_SAVE = "Please log in to save posts"
    SAVED = "Post saved to library! 📌"
    UNSAVED = "Post removed from library"
    SAVE_FAILED = "Failed to save post"

    CONTENT_EMPTY = "Please enter some content!"
    TAGS_EMPTY = "Please select at least one tag!"
    CONTENT_TOO_LONG = "Content is too long! Maximum {limit} characters."
    POST_CREATED = "Post created successfully! 🔥"
    POST_FAILED = "Failed to create post"

    LOGIN_TO_DELETE = "Please log in to delete posts"
    NOT_OWNER = "You can only delete your own posts"
    POST_DELETED = "Post deleted"
    DELETE_FAILED = "Failed to delete post"

    REPORTED = "Post reported. Thanks for keeping Roastr clean! 🚫"
    REPORT_FAILED = "Failed to report post"

    LOGIN_FOR_LIBRARY = "Please log in to view your library"
    LOGIN_FOR_PROFILE = "Please log in to edit your profile"
    USERNAME_EMPTY = "Please enter a username!"
    PROFILE_UPDATED = "Profile updated successfully!"
    PROFILE_FAILED = "Failed to update profile"
