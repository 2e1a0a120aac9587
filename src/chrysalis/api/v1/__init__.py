# src/chrysalis/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import categories_router, submissions_router, users_router

__all__ = [
    "categories_router",
    "submissions_router",
    "users_router",
]
