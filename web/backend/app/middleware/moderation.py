"""Moderation gate as a FastAPI dependency.

Usage in a router::

    @router.post("/jobs")
    async def post_job(gated: GatedRequest = Depends(gate(GateAction.post_job))):
        ...

The dependency loads the account for this request (via the session), runs
the gate's decision table, and either hands the handler a ``GatedRequest``
or raises ``AccountRestricted``, which the app renders as a 403 carrying
the distinguished code.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from fastapi import Depends

from pintukerja.auth.models import User
from pintukerja.moderation.gate import AccountRestricted, GateAction, GateDecision, evaluate
from web.backend.app.middleware.auth import get_current_user

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatedRequest:
    """The account behind the request and the gate's (allowing) decision."""

    user: User
    action: GateAction
    decision: GateDecision


def gate(action: GateAction) -> Callable[..., Awaitable[GatedRequest]]:
    """Build a dependency enforcing *action* for the current account."""

    async def _dependency(user: User = Depends(get_current_user)) -> GatedRequest:
        decision = evaluate(user, action)
        if not decision.allowed:
            logger.info(
                "Gate denied %s for account %s: %s",
                action.value, user.id, decision.code.value if decision.code else "-",
            )
            raise AccountRestricted(decision)
        return GatedRequest(user=user, action=action, decision=decision)

    return _dependency
