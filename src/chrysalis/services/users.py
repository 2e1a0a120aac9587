"""CRUD-style helpers for managing users."""
from __future__ import annotations

import logging
import re

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chrysalis.core.errors import DuplicateResource, ValidationError
from chrysalis.core.settings import settings
from chrysalis.models import User
from chrysalis.services.stages import Stage

__all__ = [
    "create_user",
    "get_user",
    "get_user_by_username",
]

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9]+$")


def get_user(db: Session, user_id: int) -> User | None:
    """Return a single user by primary key."""
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> User | None:
    """Return a user by exact username."""
    return db.execute(select(User).where(User.username == username)).scalar_one_or_none()


def create_user(
    db: Session,
    *,
    email: str,
    username: str,
    stage: str | None = None,
) -> User:
    """Persist a new user after validating email and username.

    Raises:
        ValidationError: If the email or username is malformed, or the stage
            is not a known stage name.
        DuplicateResource: If the email or username is already taken.
    """
    email = email.strip()
    username = username.strip()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("You submitted something, but not an email address", field="email")
    if not USERNAME_PATTERN.match(username):
        raise ValidationError("Username must be alphanumeric", field="username")
    if stage is not None and stage not in {s.value for s in Stage}:
        raise ValidationError("Unknown stage", field="stage", stage=stage)

    taken = db.execute(
        select(User.id).where(or_(User.email == email, User.username == username))
    ).first()
    if taken is not None:
        raise DuplicateResource("Either email address or username is taken", resource="user")

    user = User(
        email=email,
        username=username,
        tokens=settings.initial_user_tokens,
        stage=stage,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        raise DuplicateResource(
            "Either email address or username is taken", resource="user"
        ) from err
    db.refresh(user)
    logger.info("Created user %s (%s)", user.id, user.username)
    return user
