"""Turns moderation events into in-app notifications.

Delivery is fire-and-forget: a failure here is logged and never undoes or
fails the moderation command that triggered it.
"""

from __future__ import annotations

import logging
from typing import Optional

from pintukerja.moderation.errors import StorageError
from pintukerja.moderation.models import ModerationAction, ModerationEvent
from pintukerja.notifications.store import Notification, NotificationStore

logger = logging.getLogger(__name__)

_TEMPLATES: dict[ModerationAction, tuple[str, str]] = {
    ModerationAction.verify: (
        "Akun Anda Telah Diverifikasi",
        "Selamat! Akun Anda telah diverifikasi oleh administrator.",
    ),
    ModerationAction.reject: (
        "Verifikasi Akun Ditolak",
        "Permintaan verifikasi Anda ditolak. Alasan: {reason}",
    ),
    ModerationAction.reopen: (
        "Akun Sedang Ditinjau Ulang",
        "Akun Anda sedang dalam proses verifikasi ulang oleh tim kami.",
    ),
    ModerationAction.block: (
        "Akun Anda Telah Diblokir",
        "Akses ke akun Anda telah dibatasi oleh administrator. Alasan: {reason}",
    ),
    ModerationAction.unblock: (
        "Blokir Akun Dibuka",
        "Akun Anda telah dibuka kembali dan dapat digunakan seperti biasa.",
    ),
}


class ModerationNotifier:
    """Sends one notification per moderation event to the affected account."""

    def __init__(self, store: NotificationStore) -> None:
        self._store = store

    def notify(self, account_id: str, event: ModerationEvent) -> Optional[Notification]:
        title, template = _TEMPLATES[event.action]
        message = template.format(reason=event.reason or "-")
        try:
            return self._store.add(account_id, f"moderation.{event.action.value}", title, message)
        except (StorageError, OSError) as exc:
            logger.warning(
                "Could not deliver %s notification to %s: %s",
                event.action.value, account_id, exc,
            )
            return None
