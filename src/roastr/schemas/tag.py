"""Tag-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict


class Tag(BaseModel):
    """Immutable reference tag as exposed to callers."""

    id: str
    name: str
    emoji: str
    is_sensitive: bool = False

    model_config = ConfigDict(from_attributes=True, frozen=True)
