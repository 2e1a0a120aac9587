# src/chrysalis/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .categories import router as categories_router
from .submissions import router as submissions_router
from .users import router as users_router

__all__ = [
    "categories_router",
    "submissions_router",
    "users_router",
]
