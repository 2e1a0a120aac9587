"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .category import CategoryCreate, CategoryResponse
from .content import ContentResponse
from .submission import SubmissionCreate, SubmissionResponse
from .user import UserResponse, UserSummary

__all__ = [
    "CategoryCreate", "CategoryResponse",
    "ContentResponse",
    "SubmissionCreate", "SubmissionResponse",
    "UserResponse", "UserSummary",
]
