"""Admin activity log.

Each account moderation command, verification-request decision and
self-registration leaves one entry here, next to the per-account
moderation history. Entries are JSON lines in one file per UTC day under
``$PINTUKERJA_HOME/audit_logs/``.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import threading
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterator, Optional

from pintukerja import config
from pintukerja.moderation.models import ModerationAction, ModerationEvent
from pintukerja.utils.clock import utcnow
from pintukerja.utils.jsonfile import store_lock

if TYPE_CHECKING:
    from pintukerja.auth.models import User

logger = logging.getLogger(__name__)


class AuditAction(str, Enum):
    """Everything an admin activity entry can record."""

    register = "account.register"
    verify = "account.verify"
    reject = "account.reject"
    reopen = "account.reopen"
    block = "account.block"
    unblock = "account.unblock"
    request_approved = "verification_request.approved"
    request_rejected = "verification_request.rejected"

    @classmethod
    def for_moderation(cls, action: ModerationAction | str) -> "AuditAction":
        return cls(f"account.{ModerationAction(action).value}")

    @classmethod
    def for_request(cls, status: str) -> "AuditAction":
        return cls(f"verification_request.{status}")


class ResourceType(str, Enum):
    account = "account"
    verification_request = "verification_request"


@dataclass
class AuditEntry:
    id: str
    timestamp: str
    actor: str
    action: str
    resource_type: str
    resource_id: str
    details: dict[str, Any] = field(default_factory=dict)
    success: bool = True

    def csv_row(self) -> list[Any]:
        return [
            self.id, self.timestamp, self.actor, self.action, self.resource_type,
            self.resource_id, self.success, json.dumps(self.details, ensure_ascii=False),
        ]


CSV_HEADER = ["id", "timestamp", "actor", "action", "resource_type", "resource_id", "success", "details"]


class AuditLogger:
    """Append-only moderation activity log over daily JSONL files."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = Path(base_dir) if base_dir else config.get_data_dir() / "audit_logs"
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._file_lock = store_lock(self._base_dir / "activity")

    # -- writing -------------------------------------------------------------

    def log_event(
        self,
        actor: str,
        action: AuditAction | str,
        resource_type: ResourceType | str,
        resource_id: str,
        details: Optional[dict[str, Any]] = None,
        success: bool = True,
    ) -> AuditEntry:
        """Append one entry. Unknown action names raise ``ValueError``."""
        now = utcnow()
        entry = AuditEntry(
            id=uuid.uuid4().hex[:16],
            timestamp=now.isoformat(),
            actor=actor,
            action=AuditAction(action).value,
            resource_type=ResourceType(resource_type).value,
            resource_id=resource_id,
            details=details or {},
            success=success,
        )
        day_file = self._base_dir / f"{now:%Y-%m-%d}.jsonl"
        with self._lock, self._file_lock:
            with day_file.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(asdict(entry), ensure_ascii=False) + "\n")
        return entry

    def log_moderation(self, event: ModerationEvent, account: "User") -> AuditEntry:
        """Record a committed moderation transition on *account*."""
        return self.log_event(
            actor=event.actor_admin_id,
            action=AuditAction.for_moderation(event.action),
            resource_type=ResourceType.account,
            resource_id=account.id,
            details={
                "event_id": event.id,
                "from_state": event.from_state,
                "to_state": event.to_state,
                "reason": event.reason,
                "role": account.role.value,
            },
        )

    def log_registration(self, account: "User") -> AuditEntry:
        return self.log_event(
            actor=account.id,
            action=AuditAction.register,
            resource_type=ResourceType.account,
            resource_id=account.id,
            details={
                "role": account.role.value,
                "verification_status": account.verification_status.value,
            },
        )

    def log_request_decision(
        self, request: dict, admin_id: str, transitioned: bool = True
    ) -> AuditEntry:
        """Record an admin decision on a verification request.

        *transitioned* is False when the account already had the decided
        status, so closing the request moved nothing.
        """
        return self.log_event(
            actor=admin_id,
            action=AuditAction.for_request(request["status"]),
            resource_type=ResourceType.verification_request,
            resource_id=request["id"],
            details={
                "subject_id": request["subject_id"],
                "review_notes": request["review_notes"],
                "transitioned": transitioned,
            },
        )

    # -- reading -------------------------------------------------------------

    def _iter_entries(self) -> Iterator[AuditEntry]:
        for path in sorted(self._base_dir.glob("*.jsonl")):
            try:
                lines = path.read_text(encoding="utf-8").splitlines()
            except OSError as exc:
                logger.warning("Skipping unreadable audit file %s: %s", path, exc)
                continue
            for lineno, line in enumerate(lines, 1):
                if not line.strip():
                    continue
                try:
                    yield AuditEntry(**json.loads(line))
                except (json.JSONDecodeError, TypeError) as exc:
                    logger.warning("Skipping malformed audit line %s:%d: %s", path, lineno, exc)

    def get_events(
        self,
        *,
        actor: Optional[str] = None,
        action: Optional[str] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = 200,
    ) -> list[AuditEntry]:
        """Entries matching every given filter, newest first.

        ``start_date`` and ``end_date`` compare as strings against the ISO
        timestamp, so a bare ``YYYY-MM-DD`` start includes that whole day.
        """
        wanted = {
            "actor": actor,
            "action": action,
            "resource_type": resource_type,
            "resource_id": resource_id,
        }
        wanted = {k: v for k, v in wanted.items() if v}

        matched = []
        for entry in self._iter_entries():
            if any(getattr(entry, k) != v for k, v in wanted.items()):
                continue
            if start_date and entry.timestamp < start_date:
                continue
            if end_date and entry.timestamp > end_date:
                continue
            matched.append(entry)

        matched.sort(key=lambda e: e.timestamp, reverse=True)
        return matched[:limit]

    def export_events(self, fmt: str = "json", limit: int = 10000, **filters: Any) -> str:
        """Render matching entries as ``json`` or ``csv``."""
        entries = self.get_events(limit=limit, **filters)
        if fmt == "csv":
            buf = io.StringIO()
            writer = csv.writer(buf, lineterminator="\n")
            writer.writerow(CSV_HEADER)
            writer.writerows(e.csv_row() for e in entries)
            return buf.getvalue()
        return json.dumps([asdict(e) for e in entries], indent=2, ensure_ascii=False)
