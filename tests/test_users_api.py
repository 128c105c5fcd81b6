import pytest_asyncio

from conftest import bearer
from sendroli.models import UserRole


@pytest_asyncio.fixture
async def admin_token(client, admin) -> str:
    r = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    assert r.status_code == 200, r.text
    return r.json()["token"]


async def _login(client, username, password) -> str:
    r = await client.post("/api/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["token"]


async def test_admin_lists_users(client, admin_token, create_user):
    await create_user("finance", "finance123", role=UserRole.FINANCIAL)

    r = await client.get("/api/users", headers=bearer(admin_token))
    assert r.status_code == 200, r.text
    assert {u["username"] for u in r.json()} == {"admin", "finance"}

    r = await client.get("/api/users", params={"role": "financial"}, headers=bearer(admin_token))
    assert [u["username"] for u in r.json()] == ["finance"]


async def test_non_admin_cannot_list_users(client, create_user):
    await create_user("designer", "design123", role=UserRole.DESIGNER)
    token = await _login(client, "designer", "design123")

    r = await client.get("/api/users", headers=bearer(token))
    assert r.status_code == 403
    assert r.json()["code"] == "FORBIDDEN_ROLE"


async def test_get_unknown_user_is_404(client, admin_token):
    r = await client.get("/api/users/00000000-0000-0000-0000-000000000000", headers=bearer(admin_token))
    assert r.status_code == 404


async def test_force_logout_kills_target_session(client, admin_token, create_user):
    worker = await create_user("worker", "worker123", role=UserRole.WORKER)
    token = await _login(client, "worker", "worker123")

    r = await client.post(f"/api/users/{worker.id}/force-logout", headers=bearer(admin_token))
    assert r.status_code == 200, r.text
    assert r.json()["message"] == "Session terminated"

    r = await client.get("/api/auth/me", headers=bearer(token))
    assert r.status_code == 401
    assert r.json()["code"] == "SESSION_INVALIDATED"

    # the worker can log straight back in
    await _login(client, "worker", "worker123")


async def test_force_logout_without_session(client, admin_token, create_user):
    worker = await create_user("idle", "idle1234")
    r = await client.post(f"/api/users/{worker.id}/force-logout", headers=bearer(admin_token))
    assert r.status_code == 200
    assert r.json()["message"] == "User had no active session"


async def test_deactivate_blocks_token_and_login(client, admin_token, create_user):
    client_user = await create_user("acme", "acme1234", role=UserRole.CLIENT)
    token = await _login(client, "acme", "acme1234")

    r = await client.post(f"/api/users/{client_user.id}/deactivate", headers=bearer(admin_token))
    assert r.status_code == 200, r.text
    assert r.json()["isActive"] is False

    r = await client.get("/api/auth/me", headers=bearer(token))
    assert r.status_code == 401
    assert r.json()["code"] == "ACCOUNT_DEACTIVATED"

    r = await client.post("/api/auth/login", json={"username": "acme", "password": "acme1234"})
    assert r.status_code == 401
    assert r.json()["code"] == "ACCOUNT_DEACTIVATED"

    r = await client.post(f"/api/users/{client_user.id}/activate", headers=bearer(admin_token))
    assert r.status_code == 200
    assert r.json()["isActive"] is True

    # deactivation also ended the session, so no force is needed
    await _login(client, "acme", "acme1234")


async def test_admin_cannot_deactivate_self(client, admin_token, admin):
    r = await client.post(f"/api/users/{admin.id}/deactivate", headers=bearer(admin_token))
    assert r.status_code == 400
