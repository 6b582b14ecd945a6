"""Admin router -- account moderation, verification requests, activity log.

Every route requires an admin session. The moderation routes are thin
wrappers: the client sends a command, the service applies it, and the
updated account comes back for the client to render.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query

from pintukerja.auth.models import Role, User
from pintukerja.moderation.errors import NotFoundError, ValidationError
from pintukerja.moderation.models import VerificationStatus
from pintukerja.moderation.requests import REQUEST_STATUSES, review_request
from web.backend.app.middleware.auth import get_admin_user
from web.backend.app.models.api import (
    AccountDetailResponse,
    AuditEntryResponse,
    ReasonRequest,
    UserResponse,
    VerificationDecisionRequest,
    VerificationRequestResponse,
)
from web.backend.app.routers.common import account_detail_response, user_response
from web.backend.app.state import (
    get_audit_logger,
    get_moderation_service,
    get_request_store,
    get_user_store,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _reason(body: Optional[ReasonRequest]) -> str:
    return body.reason if body is not None else ""


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@router.get("/users", response_model=list[UserResponse], summary="List accounts")
async def list_users(
    role: Optional[str] = None,
    verification_status: Optional[str] = None,
    blocked: Optional[bool] = None,
    admin: User = Depends(get_admin_user),
):
    """List accounts, filtered by role, verification status and block state.

    ``role`` also accepts ``pemberi_kerja`` / ``pekerja``.
    """
    try:
        role_filter = Role(role) if role else None
        status_filter = VerificationStatus(verification_status) if verification_status else None
    except ValueError as exc:
        raise ValidationError(str(exc)) from None
    users = get_user_store().list_users(
        role=role_filter, verification_status=status_filter, blocked=blocked
    )
    return [user_response(u) for u in users]


@router.get("/users/{user_id}", response_model=AccountDetailResponse, summary="Account detail")
async def get_user(user_id: str, admin: User = Depends(get_admin_user)):
    """Return an account with its full moderation history."""
    user = get_user_store().get_user(user_id)
    if user is None:
        raise NotFoundError(f"Account '{user_id}' not found")
    return account_detail_response(user)


@router.post("/users/{user_id}/verify", response_model=AccountDetailResponse)
async def verify_user(user_id: str, admin: User = Depends(get_admin_user)):
    """Mark the account verified. No body."""
    user = get_moderation_service().verify(user_id, admin.id)
    return account_detail_response(user)


@router.post("/users/{user_id}/reject", response_model=AccountDetailResponse)
async def reject_user(
    user_id: str,
    body: Optional[ReasonRequest] = None,
    admin: User = Depends(get_admin_user),
):
    """Reject verification. ``reason`` is required."""
    user = get_moderation_service().reject(user_id, admin.id, _reason(body))
    return account_detail_response(user)


@router.post("/users/{user_id}/reopen", response_model=AccountDetailResponse)
async def reopen_user(
    user_id: str,
    body: Optional[ReasonRequest] = None,
    admin: User = Depends(get_admin_user),
):
    """Send the account back to pending review. ``reason`` is optional."""
    user = get_moderation_service().reopen(user_id, admin.id, _reason(body))
    return account_detail_response(user)


@router.post("/users/{user_id}/block", response_model=AccountDetailResponse)
async def block_user(
    user_id: str,
    body: Optional[ReasonRequest] = None,
    admin: User = Depends(get_admin_user),
):
    """Block the account. ``reason`` is required; verification is untouched."""
    user = get_moderation_service().block(user_id, admin.id, _reason(body))
    return account_detail_response(user)


@router.post("/users/{user_id}/unblock", response_model=AccountDetailResponse)
async def unblock_user(
    user_id: str,
    body: Optional[ReasonRequest] = None,
    admin: User = Depends(get_admin_user),
):
    """Lift a block. ``reason`` is optional."""
    user = get_moderation_service().unblock(user_id, admin.id, _reason(body))
    return account_detail_response(user)


# ---------------------------------------------------------------------------
# Verification requests
# ---------------------------------------------------------------------------


@router.get(
    "/verification-requests",
    response_model=list[VerificationRequestResponse],
    summary="List verification requests",
)
async def list_verification_requests(
    status: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    admin: User = Depends(get_admin_user),
):
    if status and status not in REQUEST_STATUSES:
        raise ValidationError(f"Invalid status: {status}")
    requests = get_request_store().list_requests(status=status)
    return [VerificationRequestResponse(**r) for r in requests[:limit]]


@router.patch(
    "/verification-requests/{request_id}",
    response_model=VerificationRequestResponse,
    summary="Approve or reject a verification request",
)
async def decide_verification_request(
    request_id: str,
    body: VerificationDecisionRequest,
    admin: User = Depends(get_admin_user),
):
    """``approved`` verifies the account, ``rejected`` rejects it with ``review_notes``."""
    decided = review_request(
        get_request_store(),
        get_moderation_service(),
        request_id,
        admin.id,
        body.status,
        body.review_notes,
        audit=get_audit_logger(),
    )
    return VerificationRequestResponse(**decided)


# ---------------------------------------------------------------------------
# Activity log
# ---------------------------------------------------------------------------


@router.get(
    "/activity-logs",
    response_model=list[AuditEntryResponse],
    summary="Admin activity log, newest first",
)
async def activity_logs(
    actor: Optional[str] = None,
    action: Optional[str] = None,
    resource_id: Optional[str] = None,
    limit: int = Query(200, ge=1, le=10000),
    admin: User = Depends(get_admin_user),
):
    entries = get_audit_logger().get_events(
        actor=actor, action=action, resource_id=resource_id, limit=limit
    )
    return [AuditEntryResponse(**asdict(e)) for e in entries]
