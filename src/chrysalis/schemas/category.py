"""Category-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CategoryCreate(BaseModel):
    """Schema for creating a new category."""

    title: str = Field(..., min_length=1, max_length=200, description="Unique category title")


class CategoryResponse(BaseModel):
    """Schema for category information returned by the API."""

    id: int
    title: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
