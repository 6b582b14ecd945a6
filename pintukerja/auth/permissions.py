"""Role-based access control (RBAC) logic.

Roles are not hierarchical: job seekers apply, employers post, admins
moderate. Moderation state is checked separately by the gate in
``pintukerja.moderation.gate``.
"""

from __future__ import annotations

from typing import Optional

from pintukerja.auth.models import Role, User
from pintukerja.moderation.errors import ForbiddenError


def has_role(user: Optional[User], *roles: Role) -> bool:
    """Check whether *user* holds one of *roles*.

    Parameters
    ----------
    user:
        The authenticated account, or None for anonymous callers.
    roles:
        Acceptable roles.

    Returns
    -------
    bool
        True if the account exists and its role is in *roles*.
    """
    if user is None:
        return False
    user_role = user.role if isinstance(user.role, Role) else Role(user.role)
    return user_role in roles


def require_role(user: Optional[User], *roles: Role) -> None:
    """Raise ``ForbiddenError`` unless *user* holds one of *roles*.

    Usage in a router::

        @router.post("/jobs")
        async def post_job(gated: GatedRequest = Depends(gate(GateAction.post_job))):
            require_role(gated.user, Role.employer)
            ...
    """
    if not has_role(user, *roles):
        names = ", ".join(Role(r).value for r in roles)
        raise ForbiddenError(f"Requires role: {names}")


def require_admin(user: Optional[User]) -> None:
    if not has_role(user, Role.admin):
        raise ForbiddenError("Admin access required")
