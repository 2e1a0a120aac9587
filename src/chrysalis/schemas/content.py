"""Content-related Pydantic schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class ContentResponse(BaseModel):
    """Schema for resolved page content returned by the API."""

    id: int
    url: str
    type: str
    title: str
    description: str | None
    teaser_image_url: str | None
    og: dict[str, Any] | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
