"""Runtime configuration read from environment variables.

Values are looked up on every call rather than cached at import time so
that the CLI, the web app and tests can point the stores at a different
data directory without reloading modules.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_SESSION_HOURS = 24
DEFAULT_MAX_REASON_LENGTH = 500
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_BCRYPT_ROUNDS = 12


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_data_dir() -> Path:
    """Return the root directory for all file-backed stores."""
    raw = os.environ.get("PINTUKERJA_HOME", "")
    if raw:
        return Path(raw).expanduser()
    return Path.home() / ".pintukerja"


def get_session_hours() -> int:
    return _int_env("PINTUKERJA_SESSION_HOURS", DEFAULT_SESSION_HOURS)


def get_max_reason_length() -> int:
    """Upper bound on moderation reasons (rejection, block, review notes)."""
    return _int_env("PINTUKERJA_MAX_REASON_LENGTH", DEFAULT_MAX_REASON_LENGTH)


def get_bcrypt_rounds() -> int:
    """bcrypt work factor. Tests lower it to keep hashing fast."""
    return _int_env("PINTUKERJA_BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS)


def get_log_level() -> str:
    return os.environ.get("PINTUKERJA_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def get_cors_origins() -> list[str]:
    raw = os.environ.get("PINTUKERJA_CORS_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]
