"""File-based JSON storage for jobs and applications.

Storage path: ``$PINTUKERJA_HOME/jobs/`` with ``jobs.json`` and
``applications.json``. Moderation checks happen before these methods are
called; the store only enforces data rules.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from pintukerja import config
from pintukerja.jobs.models import Application, Job, JobType
from pintukerja.moderation.errors import InvalidStateError, NotFoundError, ValidationError
from pintukerja.utils.jsonfile import read_json_list, store_lock, write_json_list


def _job_to_dict(job: Job) -> dict:
    d = asdict(job)
    d["job_type"] = job.job_type.value
    return d


def _application_to_dict(app: Application) -> dict:
    d = asdict(app)
    d["status"] = app.status.value
    return d


class JobStore:
    """Jobs, filtered listing, and applications."""

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        if base_dir is None:
            self._base = config.get_data_dir() / "jobs"
        else:
            self._base = Path(base_dir)
        self._base.mkdir(parents=True, exist_ok=True)
        self._jobs_path = self._base / "jobs.json"
        self._apps_path = self._base / "applications.json"
        self._lock = threading.Lock()
        self._jobs_lock = store_lock(self._jobs_path)
        self._apps_lock = store_lock(self._apps_path)

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def create_job(
        self,
        posted_by: str,
        title: str,
        description: str,
        location: str,
        job_type: JobType | str = JobType.full_time,
        *,
        company_name: str = "",
        industry: str = "",
        requirements: str = "",
        salary_min: Optional[int] = None,
        salary_max: Optional[int] = None,
    ) -> Job:
        for label, value in (("title", title), ("description", description), ("location", location)):
            if not (value or "").strip():
                raise ValidationError(f"Job {label} is required")
        try:
            job_type = JobType(job_type)
        except ValueError:
            raise ValidationError(f"Invalid job type: {job_type}") from None
        if salary_min is not None and salary_max is not None and salary_min > salary_max:
            raise ValidationError("salary_min cannot exceed salary_max")

        job = Job(
            id=str(uuid.uuid4()),
            title=title.strip(),
            description=description.strip(),
            location=location.strip(),
            job_type=job_type,
            posted_by=posted_by,
            company_name=company_name.strip(),
            industry=industry.strip(),
            requirements=requirements.strip(),
            salary_min=salary_min,
            salary_max=salary_max,
        )
        with self._lock, self._jobs_lock:
            jobs = read_json_list(self._jobs_path)
            jobs.append(_job_to_dict(job))
            write_json_list(self._jobs_path, jobs)
        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        for d in read_json_list(self._jobs_path):
            if d["id"] == job_id:
                return Job(**d)
        return None

    def list_jobs(
        self,
        keyword: str = "",
        location: str = "",
        job_type: str = "",
        industry: str = "",
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Job], int]:
        """Return one page of active jobs and the total match count.

        Keyword matches title, description or company name; location is a
        case-insensitive substring match. Newest first.
        """
        jobs = [Job(**d) for d in read_json_list(self._jobs_path) if d.get("is_active", True)]
        if keyword:
            kw = keyword.lower()
            jobs = [
                j for j in jobs
                if kw in j.title.lower() or kw in j.description.lower() or kw in j.company_name.lower()
            ]
        if location:
            jobs = [j for j in jobs if location.lower() in j.location.lower()]
        if job_type:
            jobs = [j for j in jobs if j.job_type.value == job_type]
        if industry:
            jobs = [j for j in jobs if j.industry == industry]

        jobs.sort(key=lambda j: j.created_at, reverse=True)
        page = max(page, 1)
        limit = max(limit, 1)
        offset = (page - 1) * limit
        return jobs[offset:offset + limit], len(jobs)

    def jobs_for_employer(self, employer_id: str) -> list[Job]:
        return [Job(**d) for d in read_json_list(self._jobs_path) if d["posted_by"] == employer_id]

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    def apply(self, job_id: str, applicant_id: str, cover_letter: str = "") -> Application:
        """Record an application. One application per job and applicant."""
        job = self.get_job(job_id)
        if job is None or not job.is_active:
            raise NotFoundError(f"Job '{job_id}' not found")

        application = Application(
            id=str(uuid.uuid4()),
            job_id=job_id,
            applicant_id=applicant_id,
            cover_letter=cover_letter.strip(),
        )
        with self._lock, self._apps_lock:
            apps = read_json_list(self._apps_path)
            if any(a["job_id"] == job_id and a["applicant_id"] == applicant_id for a in apps):
                raise InvalidStateError("You have already applied to this job")
            apps.append(_application_to_dict(application))
            write_json_list(self._apps_path, apps)
        return application

    def applications_for_applicant(self, applicant_id: str) -> list[Application]:
        return [
            Application(**d)
            for d in read_json_list(self._apps_path)
            if d["applicant_id"] == applicant_id
        ]

    def applications_for_job(self, job_id: str) -> list[Application]:
        return [Application(**d) for d in read_json_list(self._apps_path) if d["job_id"] == job_id]
