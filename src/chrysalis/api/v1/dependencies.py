"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from chrysalis.core.security import decode_access_token
from chrysalis.db.session import get_db
from chrysalis.models import User
from chrysalis.services.submissions import SubmissionService, get_submission_service

# Missing credentials resolve to an anonymous caller rather than a 403;
# services decide which operations need a user.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User | None:
    """Return the caller identified by the bearer token, if any.

    Args:
        credentials: HTTP Bearer token credentials, absent for anonymous calls
        db: Database session

    Returns:
        The authenticated user, or None when the token is missing, invalid,
        or names a user that no longer exists
    """
    if credentials is None:
        return None
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        return None
    return db.get(User, user_id)


def get_submission_service_dep() -> SubmissionService:
    """Return the shared submission service."""
    return get_submission_service()


# Type alias for current user dependency
CurrentUserDep = Annotated[User | None, Depends(get_current_user)]
SubmissionServiceDep = Annotated[SubmissionService, Depends(get_submission_service_dep)]
