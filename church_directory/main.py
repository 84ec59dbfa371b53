"""
Church Directory FastAPI application entry point.

Site settings: settings table -> KV cache -> page handlers
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from church_directory import __version__
from church_directory.config import get_settings
from church_directory.db.session import check_db_connection, engine
from church_directory.services.kv_store import get_kv_store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info("Church Directory starting")
    try:
        try:
            check_db_connection()
            logger.info("Database connection verified")
        except Exception as e:
            logger.critical("Database unreachable: %s", e)
            raise

        # Build the KV store now so a bad KV_BACKEND fails at startup
        get_kv_store()

        yield
    finally:
        logger.info("Church Directory shutting down")
        engine.dispose()
        logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Mount API routes
    from church_directory.api.auth import router as auth_router
    from church_directory.api.settings import router as settings_router

    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(settings_router, prefix="/api", tags=["settings"])

    # Mount HTML-serving and text routes (no prefix; serves /, /login, /admin/*, /robots.txt)
    from church_directory.api.admin_views import router as admin_views_router
    from church_directory.api.seo import router as seo_router
    from church_directory.api.views import router as views_router

    app.include_router(views_router, tags=["views"])
    app.include_router(admin_views_router, tags=["admin-views"])
    app.include_router(seo_router, tags=["seo"])

    @app.get("/health")
    def health() -> dict:
        """DB ping plus the settings cache backend in use."""
        from sqlalchemy import text

        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {
                "status": "ok",
                "version": __version__,
                "database": "connected",
                "kv_backend": settings.kv_backend,
            }
        except Exception:
            from fastapi.responses import JSONResponse

            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "version": __version__,
                    "database": "disconnected",
                    "kv_backend": settings.kv_backend,
                },
            )

    return app


app = create_app()
