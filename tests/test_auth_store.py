"""Tests for account and session storage."""

import tempfile
import threading
from pathlib import Path

import pytest

from pintukerja.auth.models import Role
from pintukerja.auth.permissions import has_role, require_admin, require_role
from pintukerja.auth.store import UserStore, hash_password, verify_password
from pintukerja.moderation.errors import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from pintukerja.moderation.models import VerificationStatus


def test_password_hashing():
    stored = hash_password("rahasia-123")
    assert stored.startswith("$2b$04$")
    assert verify_password("rahasia-123", stored)
    assert not verify_password("salah-sandi", stored)
    assert not verify_password("rahasia-123", "garbage")


def test_register_and_authenticate():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = UserStore(tmpdir)
        user = store.register("siti", "rahasia-123", "job_seeker", email="siti@example.com")

        assert store.authenticate("siti", "salah-sandi") is None
        logged_in = store.authenticate("SITI", "rahasia-123")
        assert logged_in.id == user.id
        assert logged_in.last_login


def test_register_validation():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = UserStore(tmpdir)
        with pytest.raises(ValidationError):
            store.register("  ", "rahasia-123")
        with pytest.raises(ValidationError):
            store.register("siti", "pendek")
        with pytest.raises(ValidationError):
            store.register("siti", "a" * 73)
        with pytest.raises(ValidationError):
            store.register("siti", "rahasia-123", "superuser")

        store.register("siti", "rahasia-123")
        with pytest.raises(InvalidStateError):
            store.register("Siti", "rahasia-456")


def test_role_aliases():
    assert Role("pemberi_kerja") == Role.employer
    assert Role("recruiter") == Role.employer
    assert Role("pekerja") == Role.job_seeker
    with pytest.raises(ValueError):
        Role("owner")


def test_list_users_filters():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = UserStore(tmpdir)
        store.register("pt-a", "rahasia-123", "employer")
        seeker = store.register("budi", "rahasia-123", "job_seeker")
        store.update_user(seeker.id, lambda u: setattr(u, "is_blocked", True))

        assert [u.username for u in store.list_users(role="employer")] == ["pt-a"]
        assert [u.username for u in store.list_users(verification_status="pending")] == ["pt-a"]
        assert [u.username for u in store.list_users(blocked=True)] == ["budi"]
        assert len(store.list_users()) == 2


def test_update_user_is_all_or_nothing():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = UserStore(tmpdir)
        user = store.register("pt-a", "rahasia-123", "employer")

        def _fail(u):
            u.verification_status = VerificationStatus.verified
            raise InvalidStateError("nope")

        with pytest.raises(InvalidStateError):
            store.update_user(user.id, _fail)
        assert store.get_user(user.id).verification_status == VerificationStatus.pending

        with pytest.raises(NotFoundError):
            store.update_user("missing", lambda u: None)


def test_update_profile_only_touches_profile_fields():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = UserStore(tmpdir)
        user = store.register("pt-a", "rahasia-123", "employer")

        updated = store.update_profile(user.id, company_name=" PT Baru ", phone="0812")
        assert updated.company_name == "PT Baru"
        assert updated.phone == "0812"
        assert updated.verification_status == VerificationStatus.pending

        with pytest.raises(ValidationError):
            store.update_profile(user.id, verification_status="verified")


def test_sessions():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = UserStore(tmpdir)
        user = store.register("siti", "rahasia-123")
        session = store.create_session(user.id)

        assert store.validate_session(session.token).id == user.id
        assert store.validate_session("bogus") is None

        assert store.delete_session(session.token)
        assert store.validate_session(session.token) is None
        assert not store.delete_session(session.token)


def test_expired_session_is_dropped():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = UserStore(tmpdir)
        user = store.register("siti", "rahasia-123")
        session = store.create_session(user.id, expires_in_hours=-1)

        assert store.validate_session(session.token) is None
        assert not store.delete_session(session.token)


def test_session_sees_moderation_changes_immediately():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = UserStore(tmpdir)
        user = store.register("siti", "rahasia-123")
        session = store.create_session(user.id)

        store.update_user(user.id, lambda u: setattr(u, "is_blocked", True))
        assert store.validate_session(session.token).is_blocked


def test_two_store_instances_do_not_lose_updates():
    with tempfile.TemporaryDirectory() as tmpdir:
        first = UserStore(tmpdir)
        second = UserStore(tmpdir)
        accounts = [first.register(f"budi-{i}", "rahasia-123") for i in range(6)]
        barrier = threading.Barrier(len(accounts))

        def _block(index: int) -> None:
            store = first if index % 2 else second
            barrier.wait()
            store.update_user(accounts[index].id, lambda u: setattr(u, "is_blocked", True))

        threads = [threading.Thread(target=_block, args=(i,)) for i in range(len(accounts))]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(u.is_blocked for u in UserStore(tmpdir).list_users())


def test_corrupt_store_file_raises_storage_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = UserStore(tmpdir)
        (Path(tmpdir) / "users.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError):
            store.list_users()
        with pytest.raises(StorageError):
            store.register("siti", "rahasia-123")


def test_permissions():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = UserStore(tmpdir)
        admin = store.register("admin", "rahasia-admin", "admin")
        seeker = store.register("budi", "rahasia-123")

        assert has_role(admin, Role.admin)
        assert not has_role(seeker, Role.admin, Role.employer)
        require_role(seeker, Role.job_seeker)
        require_admin(admin)
        with pytest.raises(ForbiddenError):
            require_admin(seeker)
        with pytest.raises(ForbiddenError):
            require_role(seeker, "employer")
