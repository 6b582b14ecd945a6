"""Verification requests submitted by employers for admin review.

A request is a queue item, not a state change: submitting one leaves the
account's ``verification_status`` untouched. Only an admin decision on the
request moves the account, through ``ModerationService``.
"""

from __future__ import annotations

import logging
import threading
import uuid
from pathlib import Path
from typing import Optional

from pintukerja import config
from pintukerja.auth.models import Role, User
from pintukerja.moderation.errors import InvalidStateError, NotFoundError, ValidationError
from pintukerja.moderation.models import VerificationStatus
from pintukerja.moderation.service import ModerationService, clean_reason
from pintukerja.security.audit_log import AuditLogger
from pintukerja.utils.clock import utcnow_iso
from pintukerja.utils.jsonfile import read_json_list, store_lock, write_json_list

logger = logging.getLogger(__name__)

REQUEST_STATUSES = ("pending", "approved", "rejected")


class VerificationRequestStore:
    """File-based storage for verification requests.

    Storage path: ``$PINTUKERJA_HOME/verification/requests.json``.
    """

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        if base_dir is None:
            self._base = config.get_data_dir() / "verification"
        else:
            self._base = Path(base_dir)
        self._base.mkdir(parents=True, exist_ok=True)
        self._requests_path = self._base / "requests.json"
        self._lock = threading.Lock()
        self._file_lock = store_lock(self._requests_path)

    def create_request(self, subject: User, notes: str = "") -> dict:
        """Queue a request for *subject*. One pending request per account."""
        if subject.role != Role.employer:
            raise InvalidStateError("Only employer accounts request verification")
        if subject.verification_status == VerificationStatus.verified:
            raise InvalidStateError("Account is already verified")

        request = {
            "id": str(uuid.uuid4()),
            "subject_id": subject.id,
            "subject_type": "company" if subject.company_name else "user",
            "notes": notes.strip(),
            "status": "pending",
            "created_at": utcnow_iso(),
            "decided_at": "",
            "decided_by": "",
            "review_notes": "",
        }
        with self._lock, self._file_lock:
            requests = read_json_list(self._requests_path)
            if any(r["subject_id"] == subject.id and r["status"] == "pending" for r in requests):
                raise InvalidStateError("A verification request is already pending")
            requests.append(request)
            write_json_list(self._requests_path, requests)
        return request

    def get_request(self, request_id: str) -> Optional[dict]:
        for r in read_json_list(self._requests_path):
            if r["id"] == request_id:
                return r
        return None

    def list_requests(
        self, status: Optional[str] = None, subject_id: Optional[str] = None
    ) -> list[dict]:
        """Return requests, newest first, optionally filtered."""
        requests = read_json_list(self._requests_path)
        if status:
            requests = [r for r in requests if r.get("status") == status]
        if subject_id:
            requests = [r for r in requests if r.get("subject_id") == subject_id]
        requests.sort(key=lambda r: r.get("created_at", ""), reverse=True)
        return requests

    def mark_decided(
        self, request_id: str, status: str, admin_id: str, review_notes: str = ""
    ) -> dict:
        with self._lock, self._file_lock:
            requests = read_json_list(self._requests_path)
            for r in requests:
                if r["id"] == request_id:
                    if r["status"] != "pending":
                        raise InvalidStateError(f"Request is already {r['status']}")
                    r["status"] = status
                    r["decided_at"] = utcnow_iso()
                    r["decided_by"] = admin_id
                    r["review_notes"] = review_notes
                    write_json_list(self._requests_path, requests)
                    return r
        raise NotFoundError(f"Verification request '{request_id}' not found")

    def get_pending_count(self) -> int:
        return len(self.list_requests(status="pending"))


def review_request(
    requests: VerificationRequestStore,
    moderation: ModerationService,
    request_id: str,
    admin_id: str,
    status: str,
    review_notes: str = "",
    audit: Optional[AuditLogger] = None,
) -> dict:
    """Approve or reject a pending request and apply the matching transition.

    ``approved`` verifies the account; ``rejected`` rejects it using
    *review_notes* as the rejection reason. When the account already has
    that status (rejected again after a resubmission, or verified directly
    while the request waited) the request is closed without a transition
    and the account keeps its existing history and rejection reason.
    """
    if status not in ("approved", "rejected"):
        raise ValidationError("Status must be 'approved' or 'rejected'")
    request = requests.get_request(request_id)
    if request is None:
        raise NotFoundError(f"Verification request '{request_id}' not found")
    if request["status"] != "pending":
        raise InvalidStateError(f"Request is already {request['status']}")

    moderation.authorize(admin_id)
    subject_id = request["subject_id"]
    if status == "approved":
        notes = clean_reason(review_notes, required=False) or ""
        target = VerificationStatus.verified
    else:
        notes = clean_reason(review_notes, required=True)
        target = VerificationStatus.rejected

    transitioned = True
    try:
        if target == VerificationStatus.verified:
            moderation.verify(subject_id, admin_id)
        else:
            moderation.reject(subject_id, admin_id, notes)
    except InvalidStateError:
        subject = moderation.get_account(subject_id)
        if subject.is_admin or subject.verification_status != target:
            raise
        transitioned = False

    decided = requests.mark_decided(request_id, status, admin_id, notes)
    if transitioned:
        logger.info("Verification request %s %s by admin %s", request_id, status, admin_id)
    else:
        logger.info(
            "Verification request %s %s by admin %s; account already %s",
            request_id, status, admin_id, target.value,
        )
    if audit is not None:
        audit.log_request_decision(decided, admin_id, transitioned=transitioned)
    return decided
