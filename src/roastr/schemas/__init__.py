"""Pydantic schemas for the Roastr front-end."""

from .common import (
    ActionResponse,
    ErrorResponse,
    FeedResponse,
    Notification,
    PostCreatedResponse,
    ProfileResponse,
    SaveResponse,
    VoteResponse,
)
from .post import FeedItem, PostCreate, PostRecord, PostStatus, PostTagLink
from .tag import Tag
from .user import Profile, ProfileUpdate, Viewer
from .vote import VoteCreate, VoteTally, VoteType

__all__ = [
    "ActionResponse", "ErrorResponse", "FeedResponse", "Notification",
    "PostCreatedResponse", "ProfileResponse", "SaveResponse", "VoteResponse",
    "FeedItem", "PostCreate", "PostRecord", "PostStatus", "PostTagLink",
    "Tag",
    "Profile", "ProfileUpdate", "Viewer",
    "VoteCreate", "VoteTally", "VoteType",
]
