"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserSummary(BaseModel):
    """Public view of another user."""

    id: int
    username: str

    model_config = ConfigDict(from_attributes=True)


class UserResponse(BaseModel):
    """Full view of the authenticated caller."""

    id: int
    email: str
    username: str
    tokens: int = Field(..., description="Current token balance; may be negative")
    stage: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
