"""Auth domain models for accounts and sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pintukerja.moderation.models import ModerationEvent, VerificationStatus
from pintukerja.utils.clock import utcnow_iso

# Role names still sent by older clients and the Indonesian UI
_ROLE_ALIASES = {
    "recruiter": "employer",
    "pemberi_kerja": "employer",
    "pekerja": "job_seeker",
    "jobseeker": "job_seeker",
}


class Role(str, Enum):
    """Account roles. Only admins can moderate; admins are never moderated."""

    job_seeker = "job_seeker"
    employer = "employer"
    admin = "admin"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            alias = _ROLE_ALIASES.get(value.strip().lower())
            if alias is not None:
                return cls(alias)
        return None


# Fields only an admin command may change
MODERATION_FIELDS = frozenset({
    "role",
    "verification_status",
    "rejection_reason",
    "is_blocked",
    "block_reason",
    "moderation_history",
})

# Fields the account owner may edit on their own profile
PROFILE_FIELDS = ("full_name", "email", "phone", "company_name")


def initial_verification_status(role: Role) -> VerificationStatus:
    """Status assigned at registration.

    Employers wait for an admin decision; job seekers and admins are treated
    as verified because verification only gates job posting.
    """
    if role == Role.employer:
        return VerificationStatus.pending
    return VerificationStatus.verified


@dataclass
class User:
    """An account: job seeker, employer or admin."""

    id: str
    username: str
    email: str = ""
    full_name: str = ""
    phone: str = ""
    company_name: str = ""
    role: Role = Role.job_seeker
    password_hash: str = ""
    verification_status: VerificationStatus = VerificationStatus.pending
    rejection_reason: Optional[str] = None
    is_blocked: bool = False
    block_reason: Optional[str] = None
    moderation_history: list[ModerationEvent] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""
    last_login: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utcnow_iso()
        if not self.updated_at:
            self.updated_at = self.created_at
        if isinstance(self.role, str):
            self.role = Role(self.role)
        if isinstance(self.verification_status, str):
            self.verification_status = VerificationStatus(self.verification_status)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin


@dataclass
class Session:
    """Represents an active login session."""

    id: str
    user_id: str
    token: str
    created_at: str = ""
    expires_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utcnow_iso()
