"""Shared Pydantic schemas for API envelopes."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from roastr.schemas.post import FeedItem, PostRecord
from roastr.schemas.vote import VoteType


class Notification(BaseModel):
    """A user-facing message raised while serving a request."""

    level: Literal["success", "error"]
    message: str


class ActionResponse(BaseModel):
    """Result of a write action."""

    status: str = "success"
    notifications: list[Notification] = Field(default_factory=list)


class FeedResponse(BaseModel):
    """A feed (or library) view together with raised notifications."""

    items: list[FeedItem]
    notifications: list[Notification] = Field(default_factory=list)


class SaveResponse(ActionResponse):
    """Result of toggling a save."""

    is_saved: bool


class ProfileResponse(ActionResponse):
    """Current profile of the viewer."""

    username: str
    email: str | None = None


class ErrorResponse(BaseModel):
    """Body returned for failed requests."""

    detail: str
    rule: str | None = None
    notifications: list[Notification] = Field(default_factory=list)


class PostCreatedResponse(ActionResponse):
    """Result of creating a post."""

    post: PostRecord


class VoteResponse(ActionResponse):
    """Result of casting, switching or retracting a vote."""

    user_vote: VoteType | None = None
