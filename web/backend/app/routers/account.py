"""Account router -- the signed-in account's own profile, requests and dashboards.

Every route here is gated: blocked accounts get ACCOUNT_BLOCKED on all of
them. Pending and rejected employers can still edit their profile and
submit a verification request.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from pintukerja.auth.models import MODERATION_FIELDS, Role
from pintukerja.auth.permissions import require_role
from pintukerja.moderation.errors import ForbiddenError, ValidationError
from pintukerja.moderation.gate import GateAction
from web.backend.app.middleware.moderation import GatedRequest, gate
from web.backend.app.models.api import (
    EmployerDashboardResponse,
    NotificationResponse,
    ProfileUpdateRequest,
    SeekerDashboardResponse,
    UserResponse,
    VerificationRequestCreate,
    VerificationRequestResponse,
)
from web.backend.app.routers.common import (
    application_response,
    job_response,
    notice_response,
    user_response,
)
from web.backend.app.state import (
    get_job_store,
    get_notification_store,
    get_request_store,
    get_user_store,
)

router = APIRouter(prefix="/api", tags=["account"])


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@router.put("/profile", response_model=UserResponse, summary="Update own profile")
async def update_profile(
    body: ProfileUpdateRequest,
    gated: GatedRequest = Depends(gate(GateAction.write)),
):
    """Edit profile fields. Never changes moderation state.

    Sending any moderation field (role, verification status, block state,
    reasons, history) is refused with 403.
    """
    extra = set(body.model_extra or {})
    forbidden = sorted(extra & MODERATION_FIELDS)
    if forbidden:
        raise ForbiddenError(f"Moderation fields cannot be changed by the account owner: {forbidden}")
    if extra:
        raise ValidationError(f"Unknown profile fields: {sorted(extra)}")

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    changes = {k: v for k, v in changes.items() if k not in extra}
    user = get_user_store().update_profile(gated.user.id, **changes)
    return user_response(user)


# ---------------------------------------------------------------------------
# Verification requests
# ---------------------------------------------------------------------------


@router.post(
    "/verification-requests",
    response_model=VerificationRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ask an admin to review this employer account",
)
async def submit_verification_request(
    body: Optional[VerificationRequestCreate] = None,
    gated: GatedRequest = Depends(gate(GateAction.write)),
):
    """Queue a request. The account stays in its current status until an admin decides."""
    require_role(gated.user, Role.employer)
    notes = body.notes if body is not None else ""
    request = get_request_store().create_request(gated.user, notes)
    return VerificationRequestResponse(**request)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


@router.get("/notifications", response_model=list[NotificationResponse])
async def list_notifications(
    unread_only: bool = False,
    gated: GatedRequest = Depends(gate(GateAction.browse)),
):
    notes = get_notification_store().list_for_user(gated.user.id, unread_only=unread_only)
    return [
        NotificationResponse(
            id=n.id, kind=n.kind, title=n.title, message=n.message,
            read=n.read, created_at=n.created_at,
        )
        for n in notes
    ]


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    gated: GatedRequest = Depends(gate(GateAction.write)),
):
    n = get_notification_store().mark_read(gated.user.id, notification_id)
    return NotificationResponse(
        id=n.id, kind=n.kind, title=n.title, message=n.message,
        read=n.read, created_at=n.created_at,
    )


# ---------------------------------------------------------------------------
# Dashboards
# ---------------------------------------------------------------------------


@router.get("/dashboard", response_model=SeekerDashboardResponse, summary="Job seeker dashboard")
async def seeker_dashboard(gated: GatedRequest = Depends(gate(GateAction.browse))):
    require_role(gated.user, Role.job_seeker)
    user = gated.user
    return SeekerDashboardResponse(
        user=user_response(user),
        notice=notice_response(user),
        applications=[
            application_response(a) for a in get_job_store().applications_for_applicant(user.id)
        ],
        unread_notifications=len(get_notification_store().list_for_user(user.id, unread_only=True)),
    )


@router.get(
    "/employer/dashboard",
    response_model=EmployerDashboardResponse,
    summary="Employer dashboard with verification notice",
)
async def employer_dashboard(gated: GatedRequest = Depends(gate(GateAction.browse))):
    """Pending/rejected employers get their notice here alongside their jobs."""
    require_role(gated.user, Role.employer)
    user = gated.user
    pending = get_request_store().list_requests(status="pending", subject_id=user.id)
    return EmployerDashboardResponse(
        user=user_response(user),
        notice=notice_response(user),
        jobs=[job_response(j) for j in get_job_store().jobs_for_employer(user.id)],
        pending_verification_request=VerificationRequestResponse(**pending[0]) if pending else None,
    )
