"""Conversions from domain objects to API response models."""

from __future__ import annotations

from dataclasses import asdict

from pintukerja.auth.models import User
from pintukerja.jobs.models import Application, Job
from pintukerja.moderation.notices import account_notice
from web.backend.app.models.api import (
    AccountDetailResponse,
    AccountNoticeResponse,
    ApplicationResponse,
    JobResponse,
    ModerationEventResponse,
    UserResponse,
)


def user_response(u: User) -> UserResponse:
    """Convert a domain User to a Pydantic UserResponse."""
    return UserResponse(
        id=u.id,
        username=u.username,
        email=u.email,
        full_name=u.full_name,
        phone=u.phone,
        company_name=u.company_name,
        role=u.role.value,
        verification_status=u.verification_status.value,
        rejection_reason=u.rejection_reason,
        is_blocked=u.is_blocked,
        block_reason=u.block_reason,
        created_at=u.created_at,
        updated_at=u.updated_at,
        last_login=u.last_login,
    )


def account_detail_response(u: User) -> AccountDetailResponse:
    return AccountDetailResponse(
        **user_response(u).model_dump(),
        moderation_history=[ModerationEventResponse(**e.to_dict()) for e in u.moderation_history],
    )


def notice_response(u: User) -> AccountNoticeResponse:
    return AccountNoticeResponse(**account_notice(u).to_dict())


def job_response(job: Job) -> JobResponse:
    d = asdict(job)
    d["job_type"] = job.job_type.value
    return JobResponse(**d)


def application_response(app: Application) -> ApplicationResponse:
    d = asdict(app)
    d["status"] = app.status.value
    return ApplicationResponse(**d)
