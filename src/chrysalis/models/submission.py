"""SQLAlchemy model for link submissions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chrysalis.db.session import Base
from chrysalis.db.time import utcnow
from chrysalis.models.category import Category
from chrysalis.models.content import Content
from chrysalis.models.user import User


class Submission(Base):
    """A user's link posted into a category.

    ``stage`` caches the classification of the current yes-ballot count and
    is rewritten by every vote toggle.
    """

    __tablename__ = "submissions"
    __table_args__ = (
        Index("ix_submissions_stage", "stage"),
        Index("ix_submissions_category_id", "category_id"),
        Index("ix_submissions_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=False
    )
    content_id: Mapped[int] = mapped_column(Integer, ForeignKey("contents.id"), nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False, default="")
    stage: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    user: Mapped[User] = relationship(User, lazy="joined", innerjoin=True)
    category: Mapped[Category] = relationship(Category, lazy="joined", innerjoin=True)
    content: Mapped[Content] = relationship(Content, lazy="joined", innerjoin=True)
