"""Jobs router -- public listing plus gated posting and applying."""

from __future__ import annotations

import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from pintukerja.auth.models import Role
from pintukerja.auth.permissions import require_role
from pintukerja.moderation.errors import NotFoundError
from pintukerja.moderation.gate import GateAction
from web.backend.app.middleware.moderation import GatedRequest, gate
from web.backend.app.models.api import (
    ApplicationCreateRequest,
    ApplicationResponse,
    JobCreateRequest,
    JobListResponse,
    JobResponse,
)
from web.backend.app.routers.common import application_response, job_response
from web.backend.app.state import get_job_store

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


@router.get("", response_model=JobListResponse, summary="Browse active jobs (public)")
async def list_jobs(
    keyword: str = "",
    location: str = "",
    job_type: str = Query("", alias="jobType"),
    industry: str = "",
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    """Public browse. Not gated, so it stays reachable for blocked accounts."""
    jobs, total = get_job_store().list_jobs(
        keyword=keyword,
        location=location,
        job_type=job_type,
        industry=industry,
        page=page,
        limit=limit,
    )
    return JobListResponse(
        jobs=[job_response(j) for j in jobs],
        total=total,
        page=page,
        total_pages=math.ceil(total / limit),
    )


@router.get("/{job_id}", response_model=JobResponse, summary="Job detail (public)")
async def get_job(job_id: str):
    job = get_job_store().get_job(job_id)
    if job is None or not job.is_active:
        raise NotFoundError(f"Job '{job_id}' not found")
    return job_response(job)


@router.post(
    "",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a job (verified employers)",
)
async def post_job(
    body: JobCreateRequest,
    gated: GatedRequest = Depends(gate(GateAction.post_job)),
):
    """Pending and rejected employers receive VERIFICATION_PENDING / VERIFICATION_REJECTED."""
    require_role(gated.user, Role.employer)
    job = get_job_store().create_job(
        gated.user.id,
        body.title,
        body.description,
        body.location,
        body.job_type,
        company_name=gated.user.company_name,
        industry=body.industry,
        requirements=body.requirements,
        salary_min=body.salary_min,
        salary_max=body.salary_max,
    )
    return job_response(job)


@router.post(
    "/{job_id}/apply",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply to a job (job seekers)",
)
async def apply_to_job(
    job_id: str,
    body: Optional[ApplicationCreateRequest] = None,
    gated: GatedRequest = Depends(gate(GateAction.submit_application)),
):
    require_role(gated.user, Role.job_seeker)
    cover_letter = body.cover_letter if body is not None else ""
    application = get_job_store().apply(job_id, gated.user.id, cover_letter)
    return application_response(application)
