"""Per-request enforcement of moderation state.

``evaluate`` is a pure decision table over the account's current
``is_blocked`` / ``verification_status`` and the category of action being
attempted. Callers must pass an account record read for the current
request; nothing here caches state between requests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pintukerja.auth.models import Role, User
from pintukerja.moderation.models import VerificationStatus


class GateAction(str, Enum):
    """Categories of actions the gate distinguishes."""

    browse = "browse"
    post_job = "post_job"
    submit_application = "submit_application"
    write = "write"


class GateCode(str, Enum):
    """Distinguished denial outcomes the client renders as pages or banners."""

    account_blocked = "ACCOUNT_BLOCKED"
    verification_pending = "VERIFICATION_PENDING"
    verification_rejected = "VERIFICATION_REJECTED"


_MESSAGES = {
    GateCode.account_blocked: "Akun Anda telah diblokir oleh administrator.",
    GateCode.verification_pending: (
        "Akun Anda sedang dalam proses verifikasi. "
        "Anda dapat memposting lowongan setelah akun diverifikasi."
    ),
    GateCode.verification_rejected: (
        "Verifikasi akun Anda ditolak. Perbarui profil perusahaan Anda "
        "dan ajukan ulang verifikasi."
    ),
}


@dataclass(frozen=True)
class GateDecision:
    """Outcome of evaluating one action against one account state."""

    allowed: bool
    code: Optional[GateCode] = None
    reason: Optional[str] = None

    @property
    def message(self) -> str:
        return _MESSAGES[self.code] if self.code else ""

    def to_dict(self) -> dict:
        return {
            "code": self.code.value if self.code else None,
            "reason": self.reason,
            "message": self.message,
        }


ALLOW = GateDecision(allowed=True)


class AccountRestricted(Exception):
    """Raised by the web layer when the gate denies a request."""

    def __init__(self, decision: GateDecision) -> None:
        self.decision = decision
        super().__init__(decision.code.value if decision.code else "DENIED")


def evaluate(user: User, action: GateAction | str) -> GateDecision:
    """Decide whether *user* may perform *action* given its moderation state."""
    action = GateAction(action)
    if user.role == Role.admin:
        return ALLOW

    if user.is_blocked:
        return GateDecision(False, GateCode.account_blocked, user.block_reason)

    # Verification only gates job posting, and only for employers.
    if user.role != Role.employer or action != GateAction.post_job:
        return ALLOW

    status = user.verification_status
    if status == VerificationStatus.verified:
        return ALLOW
    if status == VerificationStatus.rejected:
        return GateDecision(False, GateCode.verification_rejected, user.rejection_reason)
    return GateDecision(False, GateCode.verification_pending)


def enforce(user: User, action: GateAction | str) -> GateDecision:
    """Like ``evaluate`` but raise ``AccountRestricted`` on denial."""
    decision = evaluate(user, action)
    if not decision.allowed:
        raise AccountRestricted(decision)
    return decision
