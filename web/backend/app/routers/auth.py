"""Auth router -- registration, login, logout and current-account status."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, Response, status

from pintukerja import config
from pintukerja.auth.models import Role, User
from pintukerja.moderation.errors import ForbiddenError, ValidationError
from web.backend.app.middleware.auth import SESSION_COOKIE, extract_token, get_current_user
from web.backend.app.models.api import (
    AuthStatusResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
)
from web.backend.app.routers.common import notice_response, user_response
from web.backend.app.state import get_audit_logger, get_user_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _login_response(user: User, response: Response) -> LoginResponse:
    session = get_user_store().create_session(user.id)
    response.set_cookie(
        SESSION_COOKIE,
        session.token,
        max_age=config.get_session_hours() * 3600,
        httponly=True,
        samesite="lax",
    )
    return LoginResponse(token=session.token, user=user_response(user), notice=notice_response(user))


@router.post(
    "/register",
    response_model=LoginResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a job seeker or employer account",
)
async def register(body: RegisterRequest, response: Response):
    """Create an account and log it in.

    Employers start with ``verification_status = pending`` and cannot post
    jobs until an admin verifies them. Job seekers are verified on creation.
    """
    try:
        role = Role(body.role)
    except ValueError:
        raise ValidationError(f"Invalid role: {body.role}") from None
    if role == Role.admin:
        raise ForbiddenError("Admin accounts cannot be self-registered")

    store = get_user_store()
    user = store.register(
        body.username,
        body.password,
        role,
        email=body.email,
        full_name=body.full_name,
        phone=body.phone,
        company_name=body.company_name,
    )
    get_audit_logger().log_registration(user)
    return _login_response(user, response)


@router.post("/login", response_model=LoginResponse, summary="Login with username and password")
async def login(body: LoginRequest, response: Response):
    """Create a session.

    Blocked accounts can still log in; the response notice tells the client
    to show the blocked page, and every gated route answers ACCOUNT_BLOCKED.
    """
    user = get_user_store().authenticate(body.username, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )
    logger.info("Account %s logged in", user.id)
    return _login_response(user, response)


@router.post("/logout", summary="Logout / invalidate session")
async def logout(
    response: Response,
    authorization: Optional[str] = Header(None),
    pk_session: Optional[str] = Cookie(None),
    user: User = Depends(get_current_user),
):
    """Invalidate the session presented with this request."""
    token = extract_token(authorization, pk_session)
    if token:
        get_user_store().delete_session(token)
    response.delete_cookie(SESSION_COOKIE)
    return {"ok": True}


@router.get("/me", response_model=AuthStatusResponse, summary="Get current account and notice")
async def me(user: User = Depends(get_current_user)):
    """Return the current account and the notice to render.

    Not gated: a blocked account needs this to show its blocked page.
    """
    return AuthStatusResponse(
        authenticated=True,
        user=user_response(user),
        notice=notice_response(user),
    )
