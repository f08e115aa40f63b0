# src/roastr/models/__init__.py
"""SQLAlchemy models for the Roastr data store."""

from .post import POST_STATUS_DELETED, POST_STATUS_VISIBLE, Post, post_tags
from .profile import Profile
from .report import Report
from .saved_post import SavedPost
from .tag import Tag
from .vote import Vote

__all__ = [
    "Post", "post_tags", "POST_STATUS_VISIBLE", "POST_STATUS_DELETED",
    "Profile",
    "Report",
    "SavedPost",
    "Tag",
    "Vote",
]
