"""
RBAC dependencies — role gating on top of token authorization.

`require_role` is a *dependency factory*: call it with a capability
name from `sendroli.rbac.policy.ROUTE_ROLES` and it returns a FastAPI
dependency that will:

1. Authorize the bearer token (via `get_current_user`), which already
   rejects superseded, logged-out and deactivated sessions.
2. Check the user's role against the capability's allowed roles.
3. Return 403 on failure — without listing which roles would pass.

Usage in a route:
    @router.get("/users")
    async def list_users(user: User = Depends(require_role("users.list"))): ...
"""

import logging

from fastapi import Depends

from sendroli.core.exceptions import RoleForbidden
from sendroli.core.security import get_current_user
from sendroli.models.user import User
from sendroli.rbac.policy import ROUTE_ROLES, is_allowed

logger = logging.getLogger("rbac")


class require_role:
    """
    Dependency factory.

    Can be used as:
        Depends(require_role("users.list"))
    """

    def __init__(self, capability: str):
        if capability not in ROUTE_ROLES:
            raise KeyError(f"Unknown capability {capability!r}; add it to ROUTE_ROLES")
        self.capability = capability

    async def __call__(self, user: User = Depends(get_current_user)) -> User:
        if not is_allowed(user.role, self.capability):
            logger.warning(
                "Role denied for user %s — role: %s, capability: %s",
                user.id,
                user.role.value,
                self.capability,
            )
            raise RoleForbidden(
                f"User role '{user.role.value}' is not authorized to access this route"
            )
        return user
