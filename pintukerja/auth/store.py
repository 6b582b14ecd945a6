"""File-based JSON storage for accounts and sessions.

Provides a DB-ready interface backed by simple JSON files under
``$PINTUKERJA_HOME/auth/``. Every read-modify-write runs under a thread
lock plus a ``.lock`` file next to the JSON file, so concurrent updates from
any process are applied one after another.
"""

from __future__ import annotations

import logging
import secrets
import threading
import uuid
from datetime import timedelta
from pathlib import Path
from typing import Callable, Optional

import bcrypt

from pintukerja import config
from pintukerja.auth.models import (
    PROFILE_FIELDS,
    Role,
    Session,
    User,
    initial_verification_status,
)
from pintukerja.moderation.errors import InvalidStateError, NotFoundError, ValidationError
from pintukerja.moderation.models import ModerationEvent, VerificationStatus
from pintukerja.utils.clock import utcnow, utcnow_iso
from pintukerja.utils.jsonfile import read_json_list, store_lock, write_json_list

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    rounds = config.get_bcrypt_rounds()
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        return False


class UserStore:
    """File-based storage for accounts and sessions.

    Storage path: ``$PINTUKERJA_HOME/auth/`` with:
    - ``users.json`` -- list of account dicts, moderation history inline
    - ``sessions.json`` -- list of session dicts
    """

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        if base_dir is None:
            self._base = config.get_data_dir() / "auth"
        else:
            self._base = Path(base_dir)
        self._base.mkdir(parents=True, exist_ok=True)
        self._users_path = self._base / "users.json"
        self._sessions_path = self._base / "sessions.json"
        self._lock = threading.RLock()
        self._users_lock = store_lock(self._users_path)
        self._sessions_lock = store_lock(self._sessions_path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _user_from_dict(d: dict) -> User:
        return User(
            id=d["id"],
            username=d["username"],
            email=d.get("email", ""),
            full_name=d.get("full_name", ""),
            phone=d.get("phone", ""),
            company_name=d.get("company_name", ""),
            role=Role(d.get("role", "job_seeker")),
            password_hash=d.get("password_hash", ""),
            verification_status=VerificationStatus(d.get("verification_status", "pending")),
            rejection_reason=d.get("rejection_reason"),
            is_blocked=bool(d.get("is_blocked", False)),
            block_reason=d.get("block_reason"),
            moderation_history=[
                ModerationEvent.from_dict(e) for e in d.get("moderation_history", [])
            ],
            created_at=d.get("created_at", ""),
            updated_at=d.get("updated_at", ""),
            last_login=d.get("last_login", ""),
        )

    @staticmethod
    def _user_to_dict(u: User) -> dict:
        return {
            "id": u.id,
            "username": u.username,
            "email": u.email,
            "full_name": u.full_name,
            "phone": u.phone,
            "company_name": u.company_name,
            "role": u.role.value,
            "password_hash": u.password_hash,
            "verification_status": u.verification_status.value,
            "rejection_reason": u.rejection_reason,
            "is_blocked": u.is_blocked,
            "block_reason": u.block_reason,
            "moderation_history": [e.to_dict() for e in u.moderation_history],
            "created_at": u.created_at,
            "updated_at": u.updated_at,
            "last_login": u.last_login,
        }

    # ------------------------------------------------------------------
    # Account CRUD
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> User:
        """Persist a new account. Usernames are unique, case-insensitively."""
        with self._lock, self._users_lock:
            users = read_json_list(self._users_path)
            if any(d["username"].lower() == user.username.lower() for d in users):
                raise InvalidStateError(f"Username '{user.username}' is already taken")
            users.append(self._user_to_dict(user))
            write_json_list(self._users_path, users)
        logger.info("Created %s account %s (%s)", user.role.value, user.id, user.username)
        return user

    def register(
        self,
        username: str,
        password: str,
        role: Role | str = Role.job_seeker,
        *,
        email: str = "",
        full_name: str = "",
        phone: str = "",
        company_name: str = "",
        verification_status: Optional[VerificationStatus | str] = None,
    ) -> User:
        """Validate input, hash the password and create the account."""
        username = username.strip()
        if not username:
            raise ValidationError("Username is required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        try:
            role = Role(role)
        except ValueError:
            raise ValidationError(f"Invalid role: {role}") from None

        if verification_status is None:
            status = initial_verification_status(role)
        else:
            try:
                status = VerificationStatus(verification_status)
            except ValueError:
                raise ValidationError(f"Invalid verification status: {verification_status}") from None
            if role == Role.admin:
                status = VerificationStatus.verified

        user = User(
            id=str(uuid.uuid4()),
            username=username,
            email=email.strip(),
            full_name=full_name.strip(),
            phone=phone.strip(),
            company_name=company_name.strip(),
            role=role,
            password_hash=hash_password(password),
            verification_status=status,
        )
        return self.create_user(user)

    def get_user(self, user_id: str) -> Optional[User]:
        for d in read_json_list(self._users_path):
            if d["id"] == user_id:
                return self._user_from_dict(d)
        return None

    def get_user_by_username(self, username: str) -> Optional[User]:
        for d in read_json_list(self._users_path):
            if d["username"].lower() == username.strip().lower():
                return self._user_from_dict(d)
        return None

    def list_users(
        self,
        role: Optional[Role | str] = None,
        verification_status: Optional[VerificationStatus | str] = None,
        blocked: Optional[bool] = None,
    ) -> list[User]:
        users = [self._user_from_dict(d) for d in read_json_list(self._users_path)]
        if role is not None:
            role = Role(role)
            users = [u for u in users if u.role == role]
        if verification_status is not None:
            verification_status = VerificationStatus(verification_status)
            users = [u for u in users if u.verification_status == verification_status]
        if blocked is not None:
            users = [u for u in users if u.is_blocked == blocked]
        return users

    def update_user(self, user_id: str, mutate: Callable[[User], None]) -> User:
        """Apply *mutate* to the stored account atomically.

        The callback receives the freshly read account and edits it in place.
        If it raises, nothing is written. Raises ``NotFoundError`` for an
        unknown *user_id*.
        """
        with self._lock, self._users_lock:
            users = read_json_list(self._users_path)
            for i, d in enumerate(users):
                if d["id"] == user_id:
                    user = self._user_from_dict(d)
                    mutate(user)
                    user.updated_at = utcnow_iso()
                    users[i] = self._user_to_dict(user)
                    write_json_list(self._users_path, users)
                    return user
        raise NotFoundError(f"Account '{user_id}' not found")

    def update_profile(self, user_id: str, **changes: str) -> User:
        """Update owner-editable profile fields only."""
        unknown = set(changes) - set(PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown profile fields: {sorted(unknown)}")

        def _apply(user: User) -> None:
            for key, value in changes.items():
                setattr(user, key, (value or "").strip())

        return self.update_user(user_id, _apply)

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """Return the account for valid credentials and stamp ``last_login``."""
        user = self.get_user_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            return None

        def _touch(u: User) -> None:
            u.last_login = utcnow_iso()

        return self.update_user(user.id, _touch)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, user_id: str, expires_in_hours: Optional[int] = None) -> Session:
        """Create a new session for a user."""
        if expires_in_hours is None:
            expires_in_hours = config.get_session_hours()
        now = utcnow()
        session = Session(
            id=str(uuid.uuid4()),
            user_id=user_id,
            token=secrets.token_urlsafe(48),
            created_at=now.isoformat(),
            expires_at=(now + timedelta(hours=expires_in_hours)).isoformat(),
        )

        with self._lock, self._sessions_lock:
            sessions = read_json_list(self._sessions_path)
            sessions.append({
                "id": session.id,
                "user_id": session.user_id,
                "token": session.token,
                "created_at": session.created_at,
                "expires_at": session.expires_at,
            })
            write_json_list(self._sessions_path, sessions)
        return session

    def validate_session(self, token: str) -> Optional[User]:
        """Return the account behind a live session token, or None.

        The account is read from disk on every call, so moderation changes
        are visible on the very next request.
        """
        now = utcnow_iso()
        for d in read_json_list(self._sessions_path):
            if d["token"] == token:
                if d.get("expires_at") and d["expires_at"] < now:
                    self.delete_session(token)
                    return None
                return self.get_user(d["user_id"])
        return None

    def delete_session(self, token: str) -> bool:
        with self._lock, self._sessions_lock:
            sessions = read_json_list(self._sessions_path)
            remaining = [d for d in sessions if d["token"] != token]
            if len(remaining) < len(sessions):
                write_json_list(self._sessions_path, remaining)
                return True
        return False
