import pytest

from conftest import bearer
from sendroli.models import UserRole

CHROME = {"User-Agent": "Mozilla/5.0 (X11; Linux x86_64) Chrome/120.0 Safari/537.36"}
IPHONE = {"User-Agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0) Mobile/15E148", "X-Forwarded-For": "203.0.113.9"}


async def test_force_login_scenario(client, admin):
    # 1. first login
    r = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"}, headers=CHROME)
    assert r.status_code == 200, r.text
    body = r.json()
    t1 = body["token"]
    assert body["success"] is True
    assert body["user"]["username"] == "admin"
    assert body["user"]["role"] == "admin"
    assert body["sessionInfo"]["deviceName"] == "Chrome Browser"
    assert "previousSession" not in body

    # 2. second login without force → conflict
    r = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"}, headers=IPHONE)
    assert r.status_code == 409, r.text
    conflict = r.json()
    assert conflict["code"] == "ACTIVE_SESSION"
    assert conflict["success"] is False
    assert conflict["sessionInfo"]["deviceName"] == "Chrome Browser"
    assert conflict["message"]

    # 3. forced login → new token
    r = await client.post(
        "/api/auth/login",
        json={"username": "admin", "password": "admin123", "force": True},
        headers=IPHONE,
    )
    assert r.status_code == 200, r.text
    forced = r.json()
    t2 = forced["token"]
    assert t2 != t1
    assert forced["message"] == "Previous session terminated. New session created."
    assert forced["previousSession"]["deviceName"] == "Chrome Browser"
    assert forced["sessionInfo"]["ipAddress"] == "203.0.113.9"

    # 4. old token is dead
    r = await client.get("/api/auth/me", headers=bearer(t1))
    assert r.status_code == 401
    assert r.json()["code"] == "TOKEN_INVALIDATED"

    # 5. new token works
    r = await client.get("/api/auth/me", headers=bearer(t2))
    assert r.status_code == 200, r.text
    assert r.json()["username"] == "admin"

    # 6. logout
    r = await client.post("/api/auth/logout", headers=bearer(t2))
    assert r.status_code == 200, r.text
    assert r.json()["success"] is True

    # 7. logged-out token is dead
    r = await client.get("/api/auth/me", headers=bearer(t2))
    assert r.status_code == 401
    assert r.json()["code"] == "SESSION_INVALIDATED"


async def test_login_bodies_use_camel_case(client, admin):
    r = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"}, headers=CHROME)
    assert set(r.json()) == {"success", "token", "user", "sessionInfo"}
    assert set(r.json()["sessionInfo"]) == {"deviceName", "ipAddress", "loginTime", "lastActivity"}
    assert r.json()["user"]["fullName"] == "Admin"
    assert r.json()["user"]["isActive"] is True

    r = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"}, headers=IPHONE)
    assert r.status_code == 409
    assert set(r.json()) == {"success", "message", "code", "sessionInfo"}

    r = await client.post(
        "/api/auth/login",
        json={"username": "admin", "password": "admin123", "force": True},
        headers=IPHONE,
    )
    assert set(r.json()["previousSession"]) == {"deviceName", "loginTime", "lastActivity"}


async def test_conflicting_login_does_not_change_session(client, admin, load_user):
    await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    version = (await load_user(admin.id)).session_version

    r = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    assert r.status_code == 409

    assert (await load_user(admin.id)).session_version == version


async def test_forced_login_strictly_changes_version(client, admin, load_user):
    await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    before = (await load_user(admin.id)).session_version

    r = await client.post(
        "/api/auth/login", json={"username": "admin", "password": "admin123", "force": True},
    )
    assert r.status_code == 200

    assert (await load_user(admin.id)).session_version > before


async def test_logout_twice_succeeds_and_login_needs_no_force(client, admin, load_user):
    r = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    token = r.json()["token"]

    first = await client.post("/api/auth/logout", headers=bearer(token))
    version = (await load_user(admin.id)).session_version
    second = await client.post("/api/auth/logout", headers=bearer(token))

    assert first.status_code == 200
    assert second.status_code == 200
    assert (await load_user(admin.id)).session_version == version

    r = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    assert r.status_code == 200, r.text


async def test_superseded_token_logout_does_not_end_new_session(client, admin):
    r = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    old = r.json()["token"]
    r = await client.post(
        "/api/auth/login", json={"username": "admin", "password": "admin123", "force": True},
    )
    new = r.json()["token"]

    r = await client.post("/api/auth/logout", headers=bearer(old))
    assert r.status_code == 200

    r = await client.get("/api/auth/me", headers=bearer(new))
    assert r.status_code == 200


@pytest.mark.parametrize("username", ["admin", "nobody"])
async def test_bad_credentials_are_generic(client, admin, username):
    r = await client.post("/api/auth/login", json={"username": username, "password": "wrong-password"})
    assert r.status_code == 401
    body = r.json()
    assert body["message"] == "Invalid credentials"
    assert body["code"] == "INVALID_CREDENTIALS"


async def test_protected_route_without_token(client):
    r = await client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json()["code"] == "NO_TOKEN"


async def test_protected_route_with_garbage_token(client):
    r = await client.get("/api/auth/me", headers=bearer("garbage"))
    assert r.status_code == 401
    assert r.json()["code"] == "INVALID_TOKEN"
    assert r.headers["www-authenticate"] == "Bearer"


async def test_logout_requires_a_token(client):
    r = await client.post("/api/auth/logout")
    assert r.status_code == 401
    assert r.json()["code"] == "NO_TOKEN"


async def test_validate_session_reports_live_session(client, admin):
    r = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    token = r.json()["token"]

    r = await client.get("/api/auth/validate-session", headers=bearer(token))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["sessionValid"] is True
    assert body["sessionVersion"] == 1
    assert body["loginTime"] is not None
    assert body["lastActivity"] is not None


async def test_admin_registers_user_who_can_log_in(client, admin):
    r = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    token = r.json()["token"]

    r = await client.post(
        "/api/auth/register",
        json={
            "username": "Reception1",
            "password": "front-desk",
            "fullName": "Front Desk",
            "role": "receptionist",
            "email": "desk@example.com",
        },
        headers=bearer(token),
    )
    assert r.status_code == 201, r.text
    assert r.json()["username"] == "reception1"

    r = await client.post("/api/auth/login", json={"username": "desk@example.com", "password": "front-desk"})
    assert r.status_code == 200, r.text
    assert r.json()["user"]["role"] == "receptionist"


async def test_register_rejects_duplicate_username(client, admin):
    r = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    token = r.json()["token"]

    r = await client.post(
        "/api/auth/register",
        json={"username": "admin", "password": "another1", "full_name": "Dup"},
        headers=bearer(token),
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "User already exists"


async def test_register_is_admin_only(client, create_user):
    await create_user("worker", "worker123", role=UserRole.WORKER)
    r = await client.post("/api/auth/login", json={"username": "worker", "password": "worker123"})
    token = r.json()["token"]

    r = await client.post(
        "/api/auth/register",
        json={"username": "sneaky", "password": "sneaky123", "full_name": "Sneaky"},
        headers=bearer(token),
    )
    assert r.status_code == 403
    assert r.json()["code"] == "FORBIDDEN_ROLE"


async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
