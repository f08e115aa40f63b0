"""Vote-related Pydantic schemas."""

from enum import Enum

from pydantic import BaseModel, Field


class VoteType(str, Enum):
    """Direction of a vote."""

    UPVOTE = "upvote"
    DOWNVOTE = "downvote"


class VoteCreate(BaseModel):
    """Schema for casting a vote."""

    vote_type: VoteType = Field(..., description="upvote or downvote")


class VoteTally(BaseModel):
    """Aggregate vote counts for a single post."""

    upvotes: int = 0
    downvotes: int = 0
