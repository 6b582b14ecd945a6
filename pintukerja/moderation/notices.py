"""Shape an account's moderation state into what the client renders.

The client shows exactly one of: the full-page blocked state, the pending
verification banner, the rejected banner with its reason, or nothing. It
must not derive this itself; every response that carries an ``AccountNotice``
was computed from the account record read for that request.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional

from pintukerja.auth.models import Role, User
from pintukerja.moderation.gate import GateAction, GateCode, evaluate
from pintukerja.moderation.models import VerificationStatus


class NoticeKind(str, Enum):
    none = "none"
    blocked = "blocked"
    verification_pending = "verification_pending"
    verification_rejected = "verification_rejected"


@dataclass
class AccountNotice:
    kind: NoticeKind
    code: Optional[str] = None
    title: str = ""
    message: str = ""
    reason: Optional[str] = None
    can_post_jobs: bool = False
    can_apply: bool = False

    def to_dict(self) -> dict:
        d = asdict(self)
        d["kind"] = self.kind.value
        return d


def account_notice(user: User) -> AccountNotice:
    """Return the notice for *user*'s current state."""
    can_post = user.role == Role.employer and evaluate(user, GateAction.post_job).allowed
    can_apply = user.role == Role.job_seeker and evaluate(user, GateAction.submit_application).allowed

    if user.is_blocked:
        return AccountNotice(
            kind=NoticeKind.blocked,
            code=GateCode.account_blocked.value,
            title="Akun Anda Telah Diblokir",
            message="Akses ke akun Anda telah dibatasi oleh administrator",
            reason=user.block_reason,
        )

    if user.role == Role.employer:
        status = user.verification_status
        if status == VerificationStatus.rejected:
            return AccountNotice(
                kind=NoticeKind.verification_rejected,
                code=GateCode.verification_rejected.value,
                title="Verifikasi Akun Ditolak",
                message="Silakan perbarui informasi Anda dan ajukan ulang permintaan verifikasi.",
                reason=user.rejection_reason,
                can_post_jobs=can_post,
            )
        if status in (VerificationStatus.pending, VerificationStatus.unverified):
            return AccountNotice(
                kind=NoticeKind.verification_pending,
                code=GateCode.verification_pending.value,
                title="Akun Anda Sedang Dalam Proses Verifikasi",
                message="Mohon bersabar, tim kami sedang meninjau informasi Anda",
                can_post_jobs=can_post,
            )

    return AccountNotice(kind=NoticeKind.none, can_post_jobs=can_post, can_apply=can_apply)
