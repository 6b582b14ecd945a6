"""Auth middleware -- FastAPI dependencies for extracting the current account.

Supports two ways of presenting a session token:
1. ``Authorization: Bearer <session_token>`` header
2. ``pk_session`` cookie (set by the login endpoint for browser clients)

The account is re-read from the store on every request.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Cookie, Header, HTTPException, status

from pintukerja.auth.models import User
from pintukerja.auth.permissions import require_admin
from web.backend.app.state import get_user_store

SESSION_COOKIE = "pk_session"


def extract_token(authorization: Optional[str], session_cookie: Optional[str]) -> Optional[str]:
    """Return the session token from the header, falling back to the cookie."""
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token:
            return token.strip()
    return session_cookie or None


async def get_current_user(
    authorization: Optional[str] = Header(None),
    pk_session: Optional[str] = Cookie(None),
) -> User:
    """FastAPI dependency that validates the session and loads the account.

    Raises ``401 Unauthorized`` if no valid session is presented.
    """
    token = extract_token(authorization, pk_session)
    if token:
        user = get_user_store().validate_session(token)
        if user is not None:
            return user

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_admin_user(
    authorization: Optional[str] = Header(None),
    pk_session: Optional[str] = Cookie(None),
) -> User:
    """Authenticated account that must hold the admin role (403 otherwise)."""
    user = await get_current_user(authorization=authorization, pk_session=pk_session)
    require_admin(user)
    return user
