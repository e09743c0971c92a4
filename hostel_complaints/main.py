from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from hostel_complaints.api.v1.router import router as api_v1_router
from hostel_complaints.config.settings import settings
from hostel_complaints.core.logging import setup_logging
from hostel_complaints.core.middleware import register_exception_handlers, register_middlewares
from hostel_complaints.db.init_db import init_db
from hostel_complaints.services.notification.notification_dispatcher import (
    check_admin_recipients,
    shutdown_notification_executor,
)


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under /api/v1.
    - Serves uploaded complaint images under /uploads.
    """
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS Configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register shared core middlewares (request ID, timing, error logging)
    register_middlewares(app)
    register_exception_handlers(app)

    # Mount API v1 under /api/v1
    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    app.mount(
        "/uploads",
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="uploads",
    )

    # Initialize DB schema outside production (for production, use migrations)
    @app.on_event("startup")
    async def on_startup() -> None:
        if not settings.is_production():
            init_db()
        check_admin_recipients()

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        shutdown_notification_executor()

    return app


app = create_app()
