"""Tests for YAML seeding."""

import tempfile
from pathlib import Path

import pytest
import yaml

from pintukerja.auth.store import UserStore
from pintukerja.moderation.errors import NotFoundError, ValidationError
from pintukerja.moderation.models import VerificationStatus
from pintukerja.moderation.service import ModerationService
from pintukerja.seed import apply_seed, load_seed

SEED = {
    "accounts": [
        {"username": "admin", "password": "rahasia-admin", "role": "admin"},
        {"username": "pt-maju", "password": "rahasia-123", "role": "pemberi_kerja", "company_name": "PT Maju"},
        {"username": "budi", "password": "rahasia-123", "role": "job_seeker"},
    ],
    "moderation": [
        {"action": "verify", "account": "pt-maju", "admin": "admin"},
        {"action": "block", "account": "budi", "admin": "admin", "reason": "Akun ganda"},
    ],
}


def _write(tmpdir: str, data) -> Path:
    path = Path(tmpdir) / "seed.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


def test_seed_creates_accounts_and_applies_moderation():
    with tempfile.TemporaryDirectory() as tmpdir:
        users = UserStore(Path(tmpdir) / "auth")
        result = apply_seed(load_seed(_write(tmpdir, SEED)), users, ModerationService(users))

        assert result.created == ["admin", "pt-maju", "budi"]
        assert result.applied == ["verify:pt-maju", "block:budi"]
        employer = users.get_user_by_username("pt-maju")
        assert employer.verification_status == VerificationStatus.verified
        assert len(employer.moderation_history) == 1
        assert users.get_user_by_username("budi").block_reason == "Akun ganda"


def test_seed_skips_existing_accounts():
    with tempfile.TemporaryDirectory() as tmpdir:
        users = UserStore(Path(tmpdir) / "auth")
        data = {"accounts": SEED["accounts"]}
        apply_seed(data, users, ModerationService(users))

        result = apply_seed(data, users, ModerationService(users))
        assert result.created == []
        assert result.skipped == ["admin", "pt-maju", "budi"]


def test_seed_shape_errors():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ValidationError):
            load_seed(_write(tmpdir, ["not", "a", "mapping"]))
        with pytest.raises(ValidationError):
            load_seed(_write(tmpdir, {"accounts": "admin"}))


def test_seed_unknown_account_in_moderation():
    with tempfile.TemporaryDirectory() as tmpdir:
        users = UserStore(Path(tmpdir) / "auth")
        data = {"moderation": [{"action": "verify", "account": "ghost", "admin": "admin"}]}
        with pytest.raises(NotFoundError):
            apply_seed(data, users, ModerationService(users))


def test_seed_entry_missing_username():
    with tempfile.TemporaryDirectory() as tmpdir:
        data = {"accounts": [{"password": "rahasia-123", "role": "employer"}]}
        with pytest.raises(ValidationError, match=r"accounts\[0\].*username"):
            load_seed(_write(tmpdir, data))


def test_seed_unknown_moderation_action_writes_nothing():
    with tempfile.TemporaryDirectory() as tmpdir:
        users = UserStore(Path(tmpdir) / "auth")
        data = {
            "accounts": SEED["accounts"],
            "moderation": [{"action": "ban", "account": "budi", "admin": "admin"}],
        }
        with pytest.raises(ValidationError, match="ban"):
            apply_seed(data, users, ModerationService(users))
        assert users.list_users() == []


def test_seed_rejects_bad_role_and_status():
    with tempfile.TemporaryDirectory() as tmpdir:
        for entry in (
            {"username": "x", "password": "rahasia-123", "role": "owner"},
            {"username": "x", "password": "rahasia-123", "verification_status": "approved"},
            "budi",
        ):
            with pytest.raises(ValidationError):
                load_seed(_write(tmpdir, {"accounts": [entry]}))
