"""
FastAPI application factory.

Assembles the app, registers all routers and the auth error handler,
and wires up lifecycle events.  Database schema is managed by
Alembic — NOT create_all.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from sendroli.controllers.auth_controller import router as auth_router
from sendroli.controllers.user_controller import router as user_router
from sendroli.core.config import settings
from sendroli.core.database import async_session_factory, engine
from sendroli.core.exceptions import AuthError
from sendroli.models import Base  # noqa: F401 — ensures all models are registered

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ── Register routers ─────────────────────────────────────────────
    app.include_router(auth_router)
    app.include_router(user_router)

    # ── Error handling ───────────────────────────────────────────────
    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        logger.debug("%s %s → %s", request.method, request.url.path, exc.code)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message, "code": exc.code},
            headers=headers,
        )

    # ── Startup / Shutdown ───────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup() -> None:
        """Seed the bootstrap admin on startup (idempotent).

        NOTE: Database schema is managed by Alembic migrations.
        Run `alembic upgrade head` before starting the app.
        """
        from sendroli.services.auth_service import seed_bootstrap_admin

        async with async_session_factory() as session:
            admin = await seed_bootstrap_admin(session)
            await session.commit()
        if admin is not None:
            logger.info("Bootstrap admin '%s' created.", admin.username)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await engine.dispose()
        logger.info("Database engine disposed.")

    # ── Health check ─────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
