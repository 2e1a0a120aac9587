"""SQLAlchemy model for deduplicated page content."""
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from chrysalis.db.session import Base
from chrysalis.db.time import utcnow

CONTENT_TYPE_WEB = "web"


class Content(Base):
    """Canonical record for one distinct URL.

    Rows are written once, on first sight of a URL, and never updated.
    """

    __tablename__ = "contents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Trimmed URL, compared as an exact string.
    url: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False, default=CONTENT_TYPE_WEB)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    teaser_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Raw page metadata as fetched.
    og: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
