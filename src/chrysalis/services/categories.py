"""Helpers for creating and listing categories."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chrysalis.core.errors import DuplicateResource, ValidationError
from chrysalis.models import Category

__all__ = ["add_category", "get_category", "list_categories"]

logger = logging.getLogger(__name__)


def get_category(db: Session, category_id: int) -> Category | None:
    """Return a single category by primary key."""
    return db.get(Category, category_id)


def list_categories(db: Session) -> Sequence[Category]:
    """Return all categories ordered by title."""
    return db.execute(select(Category).order_by(Category.title.asc())).scalars().all()


def add_category(db: Session, title: str) -> Category:
    """Persist a new category with a unique title.

    Raises:
        ValidationError: If the title is blank.
        DuplicateResource: If a category with the same title exists.
    """
    title = title.strip()
    if not title:
        raise ValidationError("Category title must not be empty", field="title")

    existing = db.execute(select(Category.id).where(Category.title == title)).first()
    if existing is not None:
        raise DuplicateResource("Category already exists", resource="category", title=title)

    category = Category(title=title)
    db.add(category)
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        raise DuplicateResource(
            "Category already exists", resource="category", title=title
        ) from err
    db.refresh(category)
    logger.info("Created category %s (%s)", category.id, category.title)
    return category
