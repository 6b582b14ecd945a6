"""Job board domain models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pintukerja.utils.clock import utcnow_iso


class JobType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"
    contract = "contract"
    freelance = "freelance"


class ApplicationStatus(str, Enum):
    submitted = "submitted"
    reviewed = "reviewed"
    shortlisted = "shortlisted"
    rejected = "rejected"
    accepted = "accepted"


@dataclass
class Job:
    """A job listing posted by an employer."""

    id: str
    title: str
    description: str
    location: str
    job_type: JobType
    posted_by: str
    company_name: str = ""
    industry: str = ""
    requirements: str = ""
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    is_active: bool = True
    created_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utcnow_iso()
        if isinstance(self.job_type, str):
            self.job_type = JobType(self.job_type)


@dataclass
class Application:
    """A job seeker's application to a listing."""

    id: str
    job_id: str
    applicant_id: str
    cover_letter: str = ""
    status: ApplicationStatus = ApplicationStatus.submitted
    created_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utcnow_iso()
        if isinstance(self.status, str):
            self.status = ApplicationStatus(self.status)
