# src/chrysalis/models/__init__.py
"""SQLAlchemy models for the Chrysalis application."""

from .ballot import VOTE_YES, Ballot
from .category import Category
from .content import Content
from .submission import Submission
from .user import User

__all__ = [
    "Ballot", "VOTE_YES",
    "Category",
    "Content",
    "Submission",
    "User",
]
