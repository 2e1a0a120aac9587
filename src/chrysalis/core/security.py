"""Access token helpers built on python-jose."""
from __future__ import annotations

from datetime import timedelta

from jose import JWTError, jwt

from chrysalis.core.settings import settings
from chrysalis.db.time import utcnow


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Return a signed JWT whose subject is the user's id."""
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int | None:
    """Return the user id carried by ``token``, or None if it is not valid."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    subject = payload.get("sub")
    if subject is None:
        return None
    try:
        return int(subject)
    except (TypeError, ValueError):
        return None
