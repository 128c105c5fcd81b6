import pytest

from sendroli.models import UserRole
from sendroli.rbac.dependencies import require_role
from sendroli.rbac.policy import allowed_roles, is_allowed


def test_admin_only_capabilities():
    for capability in ("auth.register", "users.list", "users.force_logout", "users.deactivate"):
        assert allowed_roles(capability) == {UserRole.ADMIN}


def test_every_role_may_read_own_session():
    for role in UserRole:
        assert is_allowed(role, "auth.me")
        assert is_allowed(role, "auth.validate_session")


def test_unknown_capability_allows_nobody():
    assert allowed_roles("orders.delete") == frozenset()
    assert not is_allowed(UserRole.ADMIN, "orders.delete")


def test_require_role_rejects_unknown_capability():
    with pytest.raises(KeyError):
        require_role("orders.delete")
