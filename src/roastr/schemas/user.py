"""Viewer identity and profile schemas."""

from pydantic import BaseModel, ConfigDict, Field


class Viewer(BaseModel):
    """The authenticated identity using the front-end."""

    id: str
    email: str | None = None

    model_config = ConfigDict(frozen=True)


class Profile(BaseModel):
    """Public display name of an identity."""

    user_id: str
    username: str


class ProfileUpdate(BaseModel):
    """Schema for changing the viewer's username."""

    username: str = Field(..., description="New display name")
