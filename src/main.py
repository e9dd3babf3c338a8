"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because
tests build apps over a temporary upload directory.

For local development:
    uvicorn src.main:app --reload

For production:
    gunicorn src.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .api.dependencies import build_storage_gateway
from .api.routes import files, health
from .config.settings import Settings, get_settings
from .infrastructure.storage.local import UPLOADS_DIR_NAME

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, workdir: Optional[Path] = None) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Settings to use; defaults to the cached environment settings
        workdir: Directory holding ``uploads``; defaults to the CWD
    """
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Build the storage gateway once per process.

        Tier selection happens here and never changes afterwards.
        """
        missing_fields = settings.validate_required_fields()
        if missing_fields:
            logger.warning(
                "Remote storage not configured",
                extra={"missing_fields": missing_fields},
            )

        gateway = build_storage_gateway(settings, workdir)
        app.state.storage_gateway = gateway

        # Objects that never reached the remote tier are served from the
        # same directory the gateway writes to
        app.mount(
            f"/{UPLOADS_DIR_NAME}",
            StaticFiles(directory=gateway.state.local_root),
            name=UPLOADS_DIR_NAME,
        )

        logger.info(
            "Upload storage API starting",
            extra={
                "version": settings.api_version,
                "remote_enabled": gateway.state.remote_enabled,
            }
        )

        yield

        logger.info("Upload storage API shutting down")

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="Stores uploaded course files on local disk and S3, and resolves download URLs.",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Routes read the same settings the app was built with
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        files.router,
        prefix="/api/v1/files",
        tags=["Files"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": settings.api_title,
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Prevents stack traces from leaking to clients.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error. Please contact support if this persists."
            }
        )

    return app


# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
