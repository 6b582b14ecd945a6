"""Error taxonomy for moderation and account operations.

Each error carries a stable ``code`` and the HTTP status the web layer
answers with. Gate denials are not errors in this sense; see
``pintukerja.moderation.gate.AccountRestricted``.
"""

from __future__ import annotations


class ModerationError(Exception):
    """Base for all pintukerja domain errors."""

    code = "MODERATION_ERROR"
    status_code = 400

    def __init__(self, message: str = "") -> None:
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


class ValidationError(ModerationError):
    """Input was rejected (blank reason, malformed field)."""

    code = "VALIDATION_ERROR"
    status_code = 400


class ForbiddenError(ModerationError):
    """The actor is not allowed to perform this operation."""

    code = "FORBIDDEN"
    status_code = 403


class NotFoundError(ModerationError):
    """The target record does not exist."""

    code = "NOT_FOUND"
    status_code = 404


class InvalidStateError(ModerationError):
    """The operation does not apply to the record's current state."""

    code = "INVALID_STATE"
    status_code = 409


class StorageError(ModerationError):
    """A store file could not be read."""

    code = "STORAGE_ERROR"
    status_code = 500
