"""Process-wide store and service instances shared by the routers.

Stores are created lazily on first use so the data directory is taken from
the environment at that moment. ``reset_state`` drops them (tests point
``PINTUKERJA_HOME`` at a temp dir and reset).
"""

from __future__ import annotations

from typing import Optional

from pintukerja.auth.store import UserStore
from pintukerja.jobs.store import JobStore
from pintukerja.moderation.requests import VerificationRequestStore
from pintukerja.moderation.service import ModerationService
from pintukerja.notifications import ModerationNotifier, NotificationStore
from pintukerja.security.audit_log import AuditLogger

_user_store: Optional[UserStore] = None
_audit: Optional[AuditLogger] = None
_notifications: Optional[NotificationStore] = None
_moderation: Optional[ModerationService] = None
_requests: Optional[VerificationRequestStore] = None
_jobs: Optional[JobStore] = None


def get_user_store() -> UserStore:
    global _user_store
    if _user_store is None:
        _user_store = UserStore()
    return _user_store


def get_audit_logger() -> AuditLogger:
    global _audit
    if _audit is None:
        _audit = AuditLogger()
    return _audit


def get_notification_store() -> NotificationStore:
    global _notifications
    if _notifications is None:
        _notifications = NotificationStore()
    return _notifications


def get_moderation_service() -> ModerationService:
    global _moderation
    if _moderation is None:
        _moderation = ModerationService(
            get_user_store(),
            audit=get_audit_logger(),
            notifier=ModerationNotifier(get_notification_store()),
        )
    return _moderation


def get_request_store() -> VerificationRequestStore:
    global _requests
    if _requests is None:
        _requests = VerificationRequestStore()
    return _requests


def get_job_store() -> JobStore:
    global _jobs
    if _jobs is None:
        _jobs = JobStore()
    return _jobs


def reset_state() -> None:
    global _user_store, _audit, _notifications, _moderation, _requests, _jobs
    _user_store = _audit = _notifications = _moderation = _requests = _jobs = None
