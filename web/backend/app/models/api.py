"""Pydantic models for API request/response serialization.

These models mirror the pintukerja dataclasses and provide JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Auth / account models
# ---------------------------------------------------------------------------


class ModerationEventResponse(BaseModel):
    """Mirrors pintukerja.moderation.models.ModerationEvent."""

    id: str
    timestamp: str
    actor_admin_id: str
    action: str
    from_state: str
    to_state: str
    reason: Optional[str] = None


class AccountNoticeResponse(BaseModel):
    """Mirrors pintukerja.moderation.notices.AccountNotice."""

    kind: str = "none"
    code: Optional[str] = None
    title: str = ""
    message: str = ""
    reason: Optional[str] = None
    can_post_jobs: bool = False
    can_apply: bool = False


class UserResponse(BaseModel):
    """Public representation of an account, moderation fields included."""

    id: str
    username: str
    email: str = ""
    full_name: str = ""
    phone: str = ""
    company_name: str = ""
    role: str = "job_seeker"
    verification_status: str = "pending"
    rejection_reason: Optional[str] = None
    is_blocked: bool = False
    block_reason: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""
    last_login: str = ""


class AccountDetailResponse(UserResponse):
    """Admin view of an account including its moderation history."""

    moderation_history: list[ModerationEventResponse] = Field(default_factory=list)


class RegisterRequest(BaseModel):
    """Self-registration. Admin accounts cannot be created this way."""

    username: str
    password: str
    role: str = "job_seeker"
    email: str = ""
    full_name: str = ""
    phone: str = ""
    company_name: str = ""


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    """Session token and the account it belongs to."""

    token: str
    user: UserResponse
    notice: AccountNoticeResponse = Field(default_factory=AccountNoticeResponse)


class AuthStatusResponse(BaseModel):
    """Current account plus the notice the client should render."""

    authenticated: bool
    user: Optional[UserResponse] = None
    notice: AccountNoticeResponse = Field(default_factory=AccountNoticeResponse)


class ProfileUpdateRequest(BaseModel):
    """Owner-editable profile fields.

    Unknown keys are kept so the router can refuse attempts to set
    moderation fields instead of silently dropping them.
    """

    model_config = ConfigDict(extra="allow")

    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company_name: Optional[str] = None


# ---------------------------------------------------------------------------
# Moderation models
# ---------------------------------------------------------------------------


class ReasonRequest(BaseModel):
    """Body of reject/block/unblock/reopen. ``rejectionReason`` is accepted too."""

    reason: str = Field(
        default="",
        validation_alias=AliasChoices("reason", "rejectionReason", "rejection_reason"),
    )


class GateDenialResponse(BaseModel):
    """403 body returned when the moderation gate denies a request."""

    code: str
    reason: Optional[str] = None
    message: str = ""


class ErrorResponse(BaseModel):
    code: str
    detail: str


class VerificationRequestCreate(BaseModel):
    notes: str = ""


class VerificationRequestResponse(BaseModel):
    id: str
    subject_id: str
    subject_type: str = "user"
    notes: str = ""
    status: str = "pending"
    created_at: str = ""
    decided_at: str = ""
    decided_by: str = ""
    review_notes: str = ""


class VerificationDecisionRequest(BaseModel):
    status: str
    review_notes: str = Field(
        default="", validation_alias=AliasChoices("review_notes", "reviewNotes")
    )


class AuditEntryResponse(BaseModel):
    id: str
    timestamp: str
    actor: str
    action: str
    resource_type: str
    resource_id: str
    details: dict[str, Any] = Field(default_factory=dict)
    success: bool = True


class NotificationResponse(BaseModel):
    id: str
    kind: str
    title: str
    message: str
    read: bool = False
    created_at: str = ""


# ---------------------------------------------------------------------------
# Job board models
# ---------------------------------------------------------------------------


class JobCreateRequest(BaseModel):
    title: str
    description: str
    location: str
    job_type: str = "full-time"
    industry: str = ""
    requirements: str = ""
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None


class JobResponse(BaseModel):
    id: str
    title: str
    description: str
    location: str
    job_type: str
    posted_by: str
    company_name: str = ""
    industry: str = ""
    requirements: str = ""
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    is_active: bool = True
    created_at: str = ""


class JobListResponse(BaseModel):
    jobs: list[JobResponse] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    total_pages: int = 0


class ApplicationCreateRequest(BaseModel):
    cover_letter: str = ""


class ApplicationResponse(BaseModel):
    id: str
    job_id: str
    applicant_id: str
    cover_letter: str = ""
    status: str = "submitted"
    created_at: str = ""


class EmployerDashboardResponse(BaseModel):
    user: UserResponse
    notice: AccountNoticeResponse
    jobs: list[JobResponse] = Field(default_factory=list)
    pending_verification_request: Optional[VerificationRequestResponse] = None


class SeekerDashboardResponse(BaseModel):
    user: UserResponse
    notice: AccountNoticeResponse
    applications: list[ApplicationResponse] = Field(default_factory=list)
    unread_notifications: int = 0
