"""Tests for the moderation service: transitions, history and invariants."""

import itertools
import tempfile
import threading
import uuid
from pathlib import Path

import pytest

from pintukerja.auth.models import Role, User
from pintukerja.auth.store import UserStore
from pintukerja.moderation.errors import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from pintukerja.moderation.models import ModerationAction, VerificationStatus
from pintukerja.moderation.service import ModerationService, clean_reason
from pintukerja.notifications import ModerationNotifier, NotificationStore
from pintukerja.security.audit_log import AuditLogger


def _setup(tmpdir: str):
    base = Path(tmpdir)
    users = UserStore(base / "auth")
    audit = AuditLogger(base / "audit")
    notes = NotificationStore(base / "notifications")
    service = ModerationService(users, audit=audit, notifier=ModerationNotifier(notes))
    admin = users.register("admin", "rahasia-admin", "admin")
    return users, service, admin, audit, notes


def _employer(users: UserStore, name: str = "pt-maju"):
    return users.register(name, "rahasia-123", "employer", company_name="PT Maju")


def test_employer_starts_pending_job_seeker_verified():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, _, admin, _, _ = _setup(tmpdir)
        employer = _employer(users)
        seeker = users.register("budi", "rahasia-123", "pekerja")

        assert employer.verification_status == VerificationStatus.pending
        assert seeker.verification_status == VerificationStatus.verified
        assert admin.verification_status == VerificationStatus.verified
        assert not employer.is_blocked
        assert employer.moderation_history == []


def test_verify_records_history_entry():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, admin, _, _ = _setup(tmpdir)
        employer = _employer(users)

        updated = service.verify(employer.id, admin.id)

        assert updated.verification_status == VerificationStatus.verified
        assert updated.rejection_reason is None
        assert len(updated.moderation_history) == 1
        event = updated.moderation_history[0]
        assert event.action == ModerationAction.verify
        assert event.actor_admin_id == admin.id
        assert (event.from_state, event.to_state) == ("pending", "verified")
        assert event.reason is None
        # persisted
        assert users.get_user(employer.id).verification_status == VerificationStatus.verified


def test_reject_requires_reason_and_stores_it_trimmed():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, admin, _, _ = _setup(tmpdir)
        employer = _employer(users)

        with pytest.raises(ValidationError):
            service.reject(employer.id, admin.id, "   ")
        assert users.get_user(employer.id).moderation_history == []

        updated = service.reject(employer.id, admin.id, "  Dokumen NPWP tidak valid  ")
        assert updated.verification_status == VerificationStatus.rejected
        assert updated.rejection_reason == "Dokumen NPWP tidak valid"
        assert updated.moderation_history[-1].reason == "Dokumen NPWP tidak valid"


def test_block_requires_reason():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, admin, _, _ = _setup(tmpdir)
        employer = _employer(users)

        with pytest.raises(ValidationError):
            service.block(employer.id, admin.id, "")
        assert not users.get_user(employer.id).is_blocked


def test_reason_too_long_is_rejected(monkeypatch):
    monkeypatch.setenv("PINTUKERJA_MAX_REASON_LENGTH", "10")
    with pytest.raises(ValidationError):
        clean_reason("x" * 11, required=True)
    assert clean_reason("x" * 10, required=True) == "x" * 10
    assert clean_reason("   ", required=False) is None


def test_verify_then_reject_clears_and_sets_reason():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, admin, _, _ = _setup(tmpdir)
        employer = _employer(users)

        service.reject(employer.id, admin.id, "Alamat tidak lengkap")
        updated = service.verify(employer.id, admin.id)

        assert updated.verification_status == VerificationStatus.verified
        assert updated.rejection_reason is None
        assert [e.action for e in updated.moderation_history] == [
            ModerationAction.reject,
            ModerationAction.verify,
        ]


def test_reopen_moves_rejected_back_to_pending():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, admin, _, _ = _setup(tmpdir)
        employer = _employer(users)
        service.reject(employer.id, admin.id, "Logo perusahaan buram")

        updated = service.reopen(employer.id, admin.id)

        assert updated.verification_status == VerificationStatus.pending
        assert updated.rejection_reason is None
        assert updated.moderation_history[-1].to_state == "pending"


def test_block_and_unblock_preserve_verification():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, admin, _, _ = _setup(tmpdir)
        employer = _employer(users)
        service.verify(employer.id, admin.id)

        blocked = service.block(employer.id, admin.id, "Lowongan palsu")
        assert blocked.is_blocked
        assert blocked.block_reason == "Lowongan palsu"
        assert blocked.verification_status == VerificationStatus.verified

        unblocked = service.unblock(employer.id, admin.id)
        assert not unblocked.is_blocked
        assert unblocked.block_reason is None
        assert unblocked.verification_status == VerificationStatus.verified
        assert [(e.from_state, e.to_state) for e in unblocked.moderation_history[1:]] == [
            ("unblocked", "blocked"),
            ("blocked", "unblocked"),
        ]


def test_verify_while_blocked_keeps_block():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, admin, _, _ = _setup(tmpdir)
        employer = _employer(users)
        service.block(employer.id, admin.id, "Spam")

        updated = service.verify(employer.id, admin.id)

        assert updated.is_blocked
        assert updated.block_reason == "Spam"
        assert updated.verification_status == VerificationStatus.verified


@pytest.mark.parametrize(
    "prepare, action",
    [
        ([("verify", None)], "verify"),
        ([("reject", "alasan")], "reject"),
        ([], "reopen"),
        ([("block", "alasan")], "block"),
        ([], "unblock"),
    ],
)
def test_redundant_transition_is_invalid_state(prepare, action):
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, admin, _, _ = _setup(tmpdir)
        employer = _employer(users)
        for name, reason in prepare:
            service.apply(name, employer.id, admin.id, reason)
        before = users.get_user(employer.id)

        with pytest.raises(InvalidStateError):
            service.apply(action, employer.id, admin.id, "alasan")

        after = users.get_user(employer.id)
        assert len(after.moderation_history) == len(before.moderation_history)
        assert after.verification_status == before.verification_status
        assert after.is_blocked == before.is_blocked


def test_non_admin_actor_is_forbidden():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, _, _, _ = _setup(tmpdir)
        employer = _employer(users)
        other = _employer(users, "pt-lain")

        with pytest.raises(ForbiddenError):
            service.verify(employer.id, other.id)
        with pytest.raises(ForbiddenError):
            service.verify(employer.id, "no-such-admin")
        assert users.get_user(employer.id).moderation_history == []


def test_unknown_account_is_not_found():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, service, admin, _, _ = _setup(tmpdir)
        with pytest.raises(NotFoundError):
            service.block("missing", admin.id, "alasan")
        with pytest.raises(NotFoundError):
            service.history("missing")


def test_admin_accounts_cannot_be_moderated():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, admin, _, _ = _setup(tmpdir)
        other_admin = users.register("admin2", "rahasia-admin", "admin")

        with pytest.raises(InvalidStateError):
            service.block(other_admin.id, admin.id, "alasan")
        with pytest.raises(InvalidStateError):
            service.block(admin.id, admin.id, "alasan")
        assert not users.get_user(other_admin.id).is_blocked


def test_check_order_forbidden_before_validation_and_not_found():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, _, _, _ = _setup(tmpdir)
        seeker = users.register("budi", "rahasia-123", "job_seeker")

        with pytest.raises(ForbiddenError):
            service.block("missing", seeker.id, "")


def test_audit_and_notification_written_per_command():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, admin, audit, notes = _setup(tmpdir)
        employer = _employer(users)

        service.reject(employer.id, admin.id, "NPWP tidak valid")

        entries = audit.get_events(resource_id=employer.id)
        assert len(entries) == 1
        assert entries[0].action == "account.reject"
        assert entries[0].actor == admin.id
        assert entries[0].details["reason"] == "NPWP tidak valid"
        assert entries[0].details["to_state"] == "rejected"
        assert entries[0].timestamp.endswith("+00:00")
        assert users.get_user(employer.id).moderation_history[0].timestamp.endswith("+00:00")

        inbox = notes.list_for_user(employer.id)
        assert len(inbox) == 1
        assert inbox[0].kind == "moderation.reject"
        assert "NPWP tidak valid" in inbox[0].message


def test_failed_command_writes_no_audit_entry():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, admin, audit, notes = _setup(tmpdir)
        employer = _employer(users)

        with pytest.raises(InvalidStateError):
            service.reopen(employer.id, admin.id)

        assert audit.get_events(resource_id=employer.id) == []
        assert notes.list_for_user(employer.id) == []


_COMMANDS = [
    ("verify", None),
    ("reject", "alasan penolakan"),
    ("reopen", None),
    ("block", "alasan blokir"),
    ("unblock", None),
]


def test_invariants_hold_over_command_sequences():
    """Apply every 3-command sequence and check the account after each step."""
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, admin, _, _ = _setup(tmpdir)

        for n, sequence in enumerate(itertools.product(_COMMANDS, repeat=3)):
            account = users.create_user(
                User(id=str(uuid.uuid4()), username=f"pt-{n}", role=Role.employer)
            )
            for action, reason in sequence:
                before = users.get_user(account.id)
                try:
                    after = service.apply(action, account.id, admin.id, reason)
                except InvalidStateError:
                    after = users.get_user(account.id)
                    assert len(after.moderation_history) == len(before.moderation_history)
                    continue

                assert len(after.moderation_history) == len(before.moderation_history) + 1
                assert after.moderation_history[:-1] == before.moderation_history
                if after.verification_status == VerificationStatus.rejected:
                    assert after.rejection_reason
                else:
                    assert after.rejection_reason is None
                if after.is_blocked:
                    assert after.block_reason
                else:
                    assert after.block_reason is None
                if action in ("block", "unblock"):
                    assert after.verification_status == before.verification_status
                else:
                    assert after.is_blocked == before.is_blocked


def test_concurrent_blocks_record_exactly_one_event():
    with tempfile.TemporaryDirectory() as tmpdir:
        users, service, admin, _, _ = _setup(tmpdir)
        employer = _employer(users)
        outcomes: list[str] = []
        barrier = threading.Barrier(2)

        def _block(reason: str) -> None:
            barrier.wait()
            try:
                service.block(employer.id, admin.id, reason)
                outcomes.append("ok")
            except InvalidStateError:
                outcomes.append("conflict")

        threads = [threading.Thread(target=_block, args=(r,)) for r in ("alasan A", "alasan B")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["conflict", "ok"]
        final = users.get_user(employer.id)
        assert final.is_blocked
        assert len(final.moderation_history) == 1
        assert final.block_reason == final.moderation_history[0].reason
