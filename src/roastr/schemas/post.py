"""Post-related Pydantic schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from roastr.schemas.tag import Tag
from roastr.schemas.vote import VoteType


class PostStatus(str, Enum):
    """Lifecycle state of a post."""

    VISIBLE = "visible"
    DELETED = "deleted"


class PostRecord(BaseModel):
    """A post row as returned by the backend, joined with its tags."""

    id: str
    content: str
    created_at: datetime
    author_id: str | None = None
    is_anonymous: bool = False
    status: PostStatus = PostStatus.VISIBLE
    tags: list[Tag] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class PostTagLink(BaseModel):
    """Join row between a post and one of its tags."""

    post_id: str
    tag_id: str


class PostCreate(BaseModel):
    """Schema for submitting a new post.

    Length and emptiness rules are enforced by the authoring service so that
    each violated rule yields its own notification.
    """

    content: str = Field(..., description="Roast text")
    tags: list[str] = Field(default_factory=list, description="Selected tag names")
    is_anonymous: bool = Field(False, description="Hide the author on the feed")


class FeedItem(BaseModel):
    """Denormalized view of a post for one viewer; rebuilt on every fetch."""

    id: str
    content: str
    tags: list[Tag]
    upvotes: int = 0
    downvotes: int = 0
    username: str
    is_anonymous: bool
    created_at: datetime
    is_nsfw: bool
    user_vote: VoteType | None = None
    is_saved: bool = False
