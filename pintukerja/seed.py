"""Load accounts (and optional moderation actions) from a YAML file.

Example::

    accounts:
      - username: admin
        password: rahasia-admin
        role: admin
      - username: pt-maju
        password: rahasia-123
        role: employer
        company_name: PT Maju Jaya
    moderation:
      - action: verify
        account: pt-maju
        admin: admin

Moderation entries go through ``ModerationService`` like any admin command,
so seeded state carries history and audit entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from pintukerja.auth.models import Role
from pintukerja.auth.store import UserStore
from pintukerja.moderation.errors import NotFoundError, ValidationError
from pintukerja.moderation.models import ModerationAction, VerificationStatus
from pintukerja.moderation.service import ModerationService

logger = logging.getLogger(__name__)


@dataclass
class SeedResult:
    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    applied: list[str] = field(default_factory=list)


def load_seed(path: str | Path) -> dict:
    """Parse a seed file and check its top-level shape."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValidationError("Seed file must be a mapping")
    check_seed(data)
    return data


def _require_text(entry: dict, key: str, where: str) -> None:
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{where}: '{key}' must be a non-empty string")


def _check_enum(entry: dict, key: str, enum_cls, where: str) -> None:
    value = entry.get(key)
    if value is None:
        return
    try:
        enum_cls(value)
    except ValueError:
        raise ValidationError(f"{where}: invalid {key} '{value}'") from None


def check_seed(data: dict) -> None:
    """Validate every entry before anything is written.

    Raises ``ValidationError`` naming the first bad entry.
    """
    for key in ("accounts", "moderation"):
        if not isinstance(data.get(key, []), list):
            raise ValidationError(f"'{key}' must be a list")

    for i, entry in enumerate(data.get("accounts", [])):
        where = f"accounts[{i}]"
        if not isinstance(entry, dict):
            raise ValidationError(f"{where} must be a mapping")
        _require_text(entry, "username", where)
        _require_text(entry, "password", where)
        _check_enum(entry, "role", Role, where)
        _check_enum(entry, "verification_status", VerificationStatus, where)

    for i, entry in enumerate(data.get("moderation", [])):
        where = f"moderation[{i}]"
        if not isinstance(entry, dict):
            raise ValidationError(f"{where} must be a mapping")
        _require_text(entry, "account", where)
        _require_text(entry, "admin", where)
        _require_text(entry, "action", where)
        _check_enum(entry, "action", ModerationAction, where)


def apply_seed(data: dict, users: UserStore, moderation: ModerationService) -> SeedResult:
    """Create missing accounts, then replay moderation actions in order.

    Existing usernames are skipped, so a seed file can be applied twice.
    """
    check_seed(data)
    result = SeedResult()

    for entry in data.get("accounts", []):
        username = entry["username"]
        if users.get_user_by_username(username) is not None:
            result.skipped.append(username)
            continue
        users.register(
            username,
            entry["password"],
            entry.get("role", "job_seeker"),
            email=entry.get("email", ""),
            full_name=entry.get("full_name", ""),
            phone=entry.get("phone", ""),
            company_name=entry.get("company_name", ""),
            verification_status=entry.get("verification_status"),
        )
        result.created.append(username)

    for entry in data.get("moderation", []):
        account = users.get_user_by_username(entry["account"])
        admin = users.get_user_by_username(entry["admin"])
        if account is None or admin is None:
            raise NotFoundError(
                f"Seed moderation refers to unknown account '{entry['account']}' or admin '{entry['admin']}'"
            )
        moderation.apply(entry["action"], account.id, admin.id, entry.get("reason"))
        result.applied.append(f"{entry['action']}:{entry['account']}")

    logger.info(
        "Seed applied: %d created, %d skipped, %d moderation actions",
        len(result.created), len(result.skipped), len(result.applied),
    )
    return result
