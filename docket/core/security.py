# docket/core/security.py
"""
Identity gate adapter: bearer JWT in, user identity (or nothing) out.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from docket.core.config import settings


class Identity(BaseModel):
    id: str


def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    payload = {"sub": user_id, "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def current_user(token: Optional[str]) -> Optional[Identity]:
    """
    Resolve a bearer token to the authenticated identity.

    Args:
        token: raw JWT, or None when no credentials were sent

    Returns:
        Identity built from the ``sub`` claim, or None if the token is
        missing, expired, malformed or carries no subject
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None
    return Identity(id=str(user_id))
