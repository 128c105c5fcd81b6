"""
One-time bootstrap script — creates the first ADMIN user.

Usage:
    python -m sendroli.scripts.create_admin

You only need this ONCE (or set BOOTSTRAP_ADMIN_USERNAME /
BOOTSTRAP_ADMIN_PASSWORD and let the app seed it on startup).  After
the first admin exists, other users are created via
POST /api/auth/register.
"""

import asyncio
import getpass

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from sendroli.core.config import settings
from sendroli.models.user import UserRole
from sendroli.services.auth_service import register_user


async def create_admin() -> None:
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async with session_factory() as session:
        # ── Collect input ────────────────────────────────────────────
        print("\nSendroli Backend — First Admin Setup\n")
        username = input("  Admin username: ").strip()
        full_name = input("  Full name:      ").strip()
        password = getpass.getpass("  Password:       ")
        confirm = getpass.getpass("  Confirm:        ")

        if password != confirm:
            print("\nPasswords do not match.")
            await engine.dispose()
            return

        if not username or not full_name or not password:
            print("\nAll fields are required.")
            await engine.dispose()
            return

        # ── Create the admin user ────────────────────────────────────
        try:
            admin_user = await register_user(
                username=username,
                password=password,
                full_name=full_name,
                role=UserRole.ADMIN,
                db=session,
            )
        except HTTPException as exc:
            print(f"\n{exc.detail}.")
            await engine.dispose()
            return
        await session.commit()

        print("\nAdmin user created successfully!")
        print(f"    ID:       {admin_user.id}")
        print(f"    Username: {admin_user.username}")
        print("    Role:     admin")
        print("\n   You can now log in via POST /api/auth/login\n")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(create_admin())
