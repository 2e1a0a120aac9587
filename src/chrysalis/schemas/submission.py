"""Submission-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .category import CategoryResponse
from .content import ContentResponse
from .user import UserSummary


class SubmissionCreate(BaseModel):
    """Schema for submitting a URL into a category."""

    category_id: int
    url: str = Field(..., min_length=1, max_length=2048, description="Page URL to submit")
    comment: str = Field("", max_length=5000, description="Free-text comment")


class SubmissionResponse(BaseModel):
    """Schema for submission information returned by the API."""

    id: int
    user_id: int
    category_id: int
    content_id: int
    comment: str
    stage: str
    votes: int = Field(..., description="Number of yes-ballots")
    me_has_voted: bool = Field(..., description="True if the caller holds a yes-ballot")
    created_at: datetime
    user: UserSummary
    category: CategoryResponse
    content: ContentResponse

    model_config = ConfigDict(from_attributes=True)
