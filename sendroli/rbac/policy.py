"""
Route capability → allowed roles.

This table is the single place that decides which role may call which
route.  Routes refer to a capability name, never to role names, e.g.

    @router.get("/users")
    async def list_users(user: User = Depends(require_role("users.list"))): ...

Adding a route means adding a row here.
"""

from sendroli.models.user import UserRole

ALL_ROLES: frozenset[UserRole] = frozenset(UserRole)
ADMIN_ONLY: frozenset[UserRole] = frozenset({UserRole.ADMIN})

# ────────────────────────────────────────────────────────────────────
# CAPABILITY TABLE
# ────────────────────────────────────────────────────────────────────
ROUTE_ROLES: dict[str, frozenset[UserRole]] = {
    # Auth
    "auth.me": ALL_ROLES,
    "auth.validate_session": ALL_ROLES,
    "auth.register": ADMIN_ONLY,
    # User management
    "users.list": ADMIN_ONLY,
    "users.view": ADMIN_ONLY,
    "users.force_logout": ADMIN_ONLY,
    "users.deactivate": ADMIN_ONLY,
}


def allowed_roles(capability: str) -> frozenset[UserRole]:
    """Roles allowed for a capability.  Unknown capabilities allow nobody."""
    return ROUTE_ROLES.get(capability, frozenset())


def is_allowed(role: UserRole, capability: str) -> bool:
    return role in allowed_roles(capability)
