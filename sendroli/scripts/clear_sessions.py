"""
Maintenance script — ends every live login session.

Usage:
    python -m sendroli.scripts.clear_sessions

Every issued token stops working; users log in again without a
session conflict.  Session versions are left as they are.
"""

import asyncio

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from sendroli.core.config import settings
from sendroli.services.session_service import logout_all


async def clear_sessions() -> int:
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async with session_factory() as session:
        ended = await logout_all(session)
        await session.commit()

    await engine.dispose()
    return ended


if __name__ == "__main__":
    count = asyncio.run(clear_sessions())
    print(f"\nCleared {count} live session(s).\n")
