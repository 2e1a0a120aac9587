# src/chrysalis/models/user.py
"""SQLAlchemy model for user accounts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from chrysalis.db.session import Base
from chrysalis.db.time import utcnow


class User(Base):
    """Account that submits links and casts ballots."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    username: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    # Owned by the external authentication provider.
    hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Ledger balance; no floor is enforced.
    tokens: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # Default stage for the user's new submissions and ballot snapshots.
    stage: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
