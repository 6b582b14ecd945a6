"""Data models for the account moderation system."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class VerificationStatus(str, Enum):
    """Verification axis of an account."""

    unverified = "unverified"
    pending = "pending"
    verified = "verified"
    rejected = "rejected"


class ModerationAction(str, Enum):
    """Admin commands that move an account between states."""

    verify = "verify"
    reject = "reject"
    reopen = "reopen"
    block = "block"
    unblock = "unblock"


# Block-axis states as they appear in history entries
BLOCKED = "blocked"
UNBLOCKED = "unblocked"


@dataclass
class ModerationEvent:
    """A single entry of an account's moderation history. Never mutated."""

    id: str
    timestamp: str
    actor_admin_id: str
    action: ModerationAction
    from_state: str
    to_state: str
    reason: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.action, str):
            self.action = ModerationAction(self.action)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "actor_admin_id": self.actor_admin_id,
            "action": self.action.value,
            "from_state": self.from_state,
            "to_state": self.to_state,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ModerationEvent":
        return cls(
            id=d["id"],
            timestamp=d["timestamp"],
            actor_admin_id=d["actor_admin_id"],
            action=d["action"],
            from_state=d["from_state"],
            to_state=d["to_state"],
            reason=d.get("reason"),
        )
