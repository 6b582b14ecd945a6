"""Helpers shared by the file-backed JSON stores."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from filelock import FileLock

from pintukerja.moderation.errors import StorageError


def store_lock(path: Path) -> FileLock:
    """Inter-process lock guarding read-modify-write of *path*.

    Every process (web workers, the CLI) opening the same store file takes
    the same ``<name>.lock`` file, so their updates apply one after another.
    """
    return FileLock(f"{path}.lock")


def read_json_list(path: Path) -> list[dict]:
    """Read a JSON list from *path*. A missing file is an empty list.

    A file that exists but cannot be parsed raises ``StorageError``; silently
    treating it as empty would let the next write wipe every record.
    """
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8") or "[]")
    except (json.JSONDecodeError, OSError) as exc:
        raise StorageError(f"Cannot read store file {path}: {exc}") from exc
    return data if isinstance(data, list) else []


def write_json_list(path: Path, data: list[dict]) -> None:
    """Atomically replace *path* with *data* serialized as JSON."""
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, default=str)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
