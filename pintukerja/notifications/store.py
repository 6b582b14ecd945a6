"""File-based in-app notification storage.

Notifications are informational only: the moderation state an account sees
always comes from its account record, never from this list.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from pintukerja import config
from pintukerja.moderation.errors import NotFoundError
from pintukerja.utils.clock import utcnow_iso
from pintukerja.utils.jsonfile import read_json_list, store_lock, write_json_list


@dataclass
class Notification:
    """A message shown in the account's notification list."""

    id: str
    user_id: str
    kind: str
    title: str
    message: str
    read: bool = False
    created_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utcnow_iso()


class NotificationStore:
    """Storage path: ``$PINTUKERJA_HOME/notifications/notifications.json``."""

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        if base_dir is None:
            self._base = config.get_data_dir() / "notifications"
        else:
            self._base = Path(base_dir)
        self._base.mkdir(parents=True, exist_ok=True)
        self._path = self._base / "notifications.json"
        self._lock = threading.Lock()
        self._file_lock = store_lock(self._path)

    def add(self, user_id: str, kind: str, title: str, message: str) -> Notification:
        note = Notification(
            id=str(uuid.uuid4()),
            user_id=user_id,
            kind=kind,
            title=title,
            message=message,
        )
        with self._lock, self._file_lock:
            notes = read_json_list(self._path)
            notes.append(asdict(note))
            write_json_list(self._path, notes)
        return note

    def list_for_user(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        """Return the account's notifications, newest first."""
        notes = [
            Notification(**d)
            for d in read_json_list(self._path)
            if d["user_id"] == user_id and not (unread_only and d.get("read"))
        ]
        notes.sort(key=lambda n: n.created_at, reverse=True)
        return notes

    def mark_read(self, user_id: str, notification_id: str) -> Notification:
        with self._lock, self._file_lock:
            notes = read_json_list(self._path)
            for d in notes:
                if d["id"] == notification_id and d["user_id"] == user_id:
                    d["read"] = True
                    write_json_list(self._path, notes)
                    return Notification(**d)
        raise NotFoundError(f"Notification '{notification_id}' not found")
