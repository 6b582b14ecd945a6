"""Account moderation commands: verify, reject, reopen, block, unblock.

The account carries two independent axes. The verification axis moves
freely between ``unverified``, ``pending``, ``verified`` and ``rejected``
(entering ``rejected`` needs a reason). The block axis toggles
``is_blocked`` (blocking needs a reason) and never touches verification,
so unblocking lands the account exactly where it was before the block.

Every command is one atomic read-modify-write on the account record. A
command that would not change anything (verifying a verified account,
blocking a blocked one, ...) raises ``InvalidStateError`` and records
nothing, so a duplicate click or a lost race surfaces as a 409 instead of
a second history entry.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from pintukerja import config
from pintukerja.auth.models import User
from pintukerja.auth.store import UserStore
from pintukerja.moderation.errors import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from pintukerja.moderation.models import (
    BLOCKED,
    UNBLOCKED,
    ModerationAction,
    ModerationEvent,
    VerificationStatus,
)
from pintukerja.notifications.notifier import ModerationNotifier
from pintukerja.security.audit_log import AuditLogger
from pintukerja.utils.clock import utcnow_iso

logger = logging.getLogger(__name__)

# Actions whose reason is mandatory
_REASON_REQUIRED = frozenset({ModerationAction.reject, ModerationAction.block})


def clean_reason(reason: Optional[str], required: bool) -> Optional[str]:
    """Trim *reason* and enforce presence and maximum length."""
    text = (reason or "").strip()
    if not text:
        if required:
            raise ValidationError("A non-empty reason is required")
        return None
    limit = config.get_max_reason_length()
    if len(text) > limit:
        raise ValidationError(f"Reason must be at most {limit} characters")
    return text


def _apply_transition(
    user: User, action: ModerationAction, reason: Optional[str]
) -> tuple[str, str]:
    """Mutate *user* for *action*; return ``(from_state, to_state)``."""
    if action == ModerationAction.block:
        if user.is_blocked:
            raise InvalidStateError("Account is already blocked")
        user.is_blocked = True
        user.block_reason = reason
        return UNBLOCKED, BLOCKED

    if action == ModerationAction.unblock:
        if not user.is_blocked:
            raise InvalidStateError("Account is not blocked")
        user.is_blocked = False
        user.block_reason = None
        return BLOCKED, UNBLOCKED

    target = {
        ModerationAction.verify: VerificationStatus.verified,
        ModerationAction.reject: VerificationStatus.rejected,
        ModerationAction.reopen: VerificationStatus.pending,
    }[action]
    previous = user.verification_status
    if previous == target:
        raise InvalidStateError(f"Account is already {target.value}")
    user.verification_status = target
    user.rejection_reason = reason if target == VerificationStatus.rejected else None
    return previous.value, target.value


class ModerationService:
    """Admin-only state transitions on employer and job-seeker accounts."""

    def __init__(
        self,
        users: UserStore,
        audit: Optional[AuditLogger] = None,
        notifier: Optional[ModerationNotifier] = None,
    ) -> None:
        self._users = users
        self._audit = audit
        self._notifier = notifier

    # -- public API ----------------------------------------------------------

    def verify(self, account_id: str, actor_admin_id: str) -> User:
        return self._run(account_id, actor_admin_id, ModerationAction.verify, None)

    def reject(self, account_id: str, actor_admin_id: str, reason: str) -> User:
        return self._run(account_id, actor_admin_id, ModerationAction.reject, reason)

    def reopen(self, account_id: str, actor_admin_id: str, reason: Optional[str] = None) -> User:
        """Send the account back to ``pending`` review (e.g. after a re-submission)."""
        return self._run(account_id, actor_admin_id, ModerationAction.reopen, reason)

    def block(self, account_id: str, actor_admin_id: str, reason: str) -> User:
        return self._run(account_id, actor_admin_id, ModerationAction.block, reason)

    def unblock(self, account_id: str, actor_admin_id: str, reason: Optional[str] = None) -> User:
        return self._run(account_id, actor_admin_id, ModerationAction.unblock, reason)

    def apply(
        self,
        action: ModerationAction | str,
        account_id: str,
        actor_admin_id: str,
        reason: Optional[str] = None,
    ) -> User:
        """Dispatch by action name (used by the CLI and request review)."""
        return self._run(account_id, actor_admin_id, ModerationAction(action), reason)

    def get_account(self, account_id: str) -> User:
        user = self._users.get_user(account_id)
        if user is None:
            raise NotFoundError(f"Account '{account_id}' not found")
        return user

    def history(self, account_id: str) -> list[ModerationEvent]:
        return list(self.get_account(account_id).moderation_history)

    def authorize(self, actor_admin_id: str) -> User:
        """Return the acting admin or raise ``ForbiddenError``."""
        actor = self._users.get_user(actor_admin_id) if actor_admin_id else None
        if actor is None or not actor.is_admin:
            raise ForbiddenError("Only an admin can change moderation state")
        return actor

    # -- internals -----------------------------------------------------------

    def _run(
        self,
        account_id: str,
        actor_admin_id: str,
        action: ModerationAction,
        reason: Optional[str],
    ) -> User:
        self.authorize(actor_admin_id)
        reason = clean_reason(reason, required=action in _REASON_REQUIRED)
        recorded: list[ModerationEvent] = []

        def _mutate(user: User) -> None:
            if user.is_admin:
                raise InvalidStateError("Admin accounts cannot be moderated")
            from_state, to_state = _apply_transition(user, action, reason)
            event = ModerationEvent(
                id=uuid.uuid4().hex,
                timestamp=utcnow_iso(),
                actor_admin_id=actor_admin_id,
                action=action,
                from_state=from_state,
                to_state=to_state,
                reason=reason,
            )
            user.moderation_history.append(event)
            recorded.append(event)

        user = self._users.update_user(account_id, _mutate)
        event = recorded[0]
        logger.info(
            "Account %s: %s (%s -> %s) by admin %s",
            account_id, action.value, event.from_state, event.to_state, actor_admin_id,
        )

        if self._audit is not None:
            self._audit.log_moderation(event, user)
        if self._notifier is not None:
            self._notifier.notify(account_id, event)
        return user
