"""Tests for the admin activity log."""

import csv
import io
import json
import tempfile
from pathlib import Path

import pytest

from pintukerja.auth.store import UserStore
from pintukerja.moderation.models import ModerationAction, ModerationEvent
from pintukerja.security.audit_log import AuditAction, AuditLogger


def test_log_and_filter():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogger(Path(tmpdir))
        audit.log_event("admin-1", "account.verify", "account", "acc-1")
        audit.log_event("admin-1", "account.block", "account", "acc-2", {"reason": "Spam"})
        audit.log_event("admin-2", "account.block", "account", "acc-1", {"reason": "Penipuan"})

        assert len(audit.get_events()) == 3
        assert len(audit.get_events(actor="admin-1")) == 2
        assert len(audit.get_events(action="account.block")) == 2
        assert [e.details["reason"] for e in audit.get_events(resource_id="acc-2")] == ["Spam"]
        assert len(audit.get_events(limit=1)) == 1


def test_events_are_newest_first():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogger(Path(tmpdir))
        first = audit.log_event("a", "account.verify", "account", "x")
        second = audit.log_event("a", "account.block", "account", "x")

        events = audit.get_events()
        assert events[0].timestamp >= events[-1].timestamp
        assert {events[0].id, events[1].id} == {first.id, second.id}


def test_malformed_lines_are_skipped():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogger(Path(tmpdir))
        audit.log_event("a", "account.verify", "account", "x")
        (Path(tmpdir) / "2020-01-01.jsonl").write_text("not json\n\n", encoding="utf-8")

        assert len(audit.get_events()) == 1


def test_export_json_and_csv():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogger(Path(tmpdir))
        audit.log_event("admin-1", "account.reject", "account", "acc-1", {"reason": "Alamat, tidak lengkap"})

        data = json.loads(audit.export_events("json"))
        assert data[0]["action"] == "account.reject"

        rows = list(csv.DictReader(io.StringIO(audit.export_events("csv"))))
        assert len(rows) == 1
        assert rows[0]["actor"] == "admin-1"
        assert json.loads(rows[0]["details"]) == {"reason": "Alamat, tidak lengkap"}


def test_unknown_action_is_refused():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogger(Path(tmpdir))
        with pytest.raises(ValueError):
            audit.log_event("admin-1", "account.ban", "account", "acc-1")
        assert audit.get_events() == []


def test_log_moderation_records_transition():
    with tempfile.TemporaryDirectory() as tmpdir:
        account = UserStore(Path(tmpdir) / "auth").register("pt-maju", "rahasia-123", "employer")
        audit = AuditLogger(Path(tmpdir) / "audit")
        event = ModerationEvent(
            id="evt-1",
            timestamp="2026-01-05T08:00:00+00:00",
            actor_admin_id="admin-1",
            action=ModerationAction.reject,
            from_state="pending",
            to_state="rejected",
            reason="NPWP kosong",
        )

        entry = audit.log_moderation(event, account)

        assert entry.action == AuditAction.reject.value == "account.reject"
        assert entry.resource_id == account.id
        assert entry.details["role"] == "employer"
        assert entry.details["reason"] == "NPWP kosong"
        assert entry.timestamp.endswith("+00:00")
        assert AuditAction.for_moderation("unblock") == AuditAction.unblock
