import os

# Configure test environment before the app (and its settings) is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from sendroli.core.database import get_db
from sendroli.core.device import DeviceInfo
from sendroli.main import app
from sendroli.models import Base, User, UserRole
from sendroli.services import auth_service


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def create_user(session_factory):
    """Factory: commit a user in its own short-lived session."""

    async def _create(
        username: str,
        password: str,
        role: UserRole = UserRole.RECEPTIONIST,
        **fields,
    ) -> User:
        async with session_factory() as session:
            user = await auth_service.register_user(
                username=username,
                password=password,
                full_name=fields.pop("full_name", username.title()),
                role=role,
                db=session,
                **fields,
            )
            await session.commit()
            return user

    return _create


@pytest.fixture
def load_user(session_factory):
    """Fresh read of a user row, for asserting on persisted state."""

    async def _load(user_id) -> User:
        async with session_factory() as session:
            return await session.get(User, user_id)

    return _load


@pytest_asyncio.fixture
async def admin(create_user) -> User:
    return await create_user("admin", "admin123", role=UserRole.ADMIN)


@pytest.fixture
def device() -> DeviceInfo:
    return DeviceInfo(
        ip_address="10.0.0.5",
        user_agent="Mozilla/5.0 Chrome/120.0",
        device_type="Chrome Browser",
        fingerprint="0123456789abcdef",
    )


@pytest.fixture
def other_device() -> DeviceInfo:
    return DeviceInfo(
        ip_address="10.0.0.9",
        user_agent="Mozilla/5.0 (iPhone)",
        device_type="Mobile Device",
        fingerprint="fedcba9876543210",
    )


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
