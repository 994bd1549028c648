"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order
- Tests can pass in services built around fakes

For local development:
    uvicorn src.main:app --reload --port 8080

For production:
    gunicorn src.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from . import __version__
from .api.dependencies import STATIC_DIR, Services, build_services
from .api.routes import browser, health, thumbnails, uploads
from .config.settings import get_settings

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Builds the store client, resolver and upload service once at
    startup unless create_app() was handed ready-made services. They
    live until the process exits; nothing needs closing.
    """
    settings = get_settings()

    logger.info(
        "Bucket browser starting",
        extra={
            "version": __version__,
            "mock_mode": {
                "storage": settings.storage_mock_mode,
                "transcoder": settings.transcoder_mock_mode,
            }
        }
    )

    if getattr(app.state, "services", None) is None:
        missing_fields = settings.validate_required_fields()
        if missing_fields:
            logger.error(
                "Missing required configuration",
                extra={"missing_fields": missing_fields}
            )
        app.state.services = build_services(settings)

    yield

    logger.info("Bucket browser shutting down")


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Application factory.

    Args:
        services: Pre-built services (tests); built at startup if None
    """
    settings = services.settings if services else get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        description="""
        Web file manager for a B2/S3 bucket.

        - Browse objects with image and video thumbnails
        - Preview, view raw, or download any object
        - Upload files into folders, with thumbnails generated on upload
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        thumbnails.router,
        prefix="/thumb",
        tags=["Thumbnails"],
    )

    app.include_router(
        uploads.router,
        prefix="/upload",
        tags=["Uploads"],
    )

    app.include_router(
        browser.router,
        tags=["Browser"],
    )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Storage failures and anything else unexpected end up here. We log
        the full error server-side but return a generic message.
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
                "detail": "Internal server error."
            }
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.app_title,
            "version": settings.app_version,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


# For debugging/development
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
        log_level=settings.log_level.lower(),
    )
