"""User-related endpoints for the Chrysalis API."""

from fastapi import APIRouter

from chrysalis.models import User
from chrysalis.schemas.user import UserResponse

from ..dependencies import CurrentUserDep

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse | None)
async def me(current_user: CurrentUserDep) -> User | None:
    """Return the authenticated caller, or null for anonymous requests."""
    return current_user
