"""Main FastAPI application for the PTM BMUP Setting API."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated, Dict, Any, Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import Settings, get_settings
from .db.connection import DatabaseManager, get_database
from .errors import register_exception_handlers
from .errors.exceptions import ServiceUnavailableError
from .middleware import RequestLoggingMiddleware
from .rate_limit import RateLimitMiddleware
from .routes import members_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=get_settings().log_format
)
logger = logging.getLogger(__name__)

SKIP_PATHS = ["/health", "/ready", "/live", "/", "/docs", "/redoc", "/openapi.json"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name} ({settings.environment})")

    logging.getLogger().setLevel(getattr(logging, settings.log_level))

    db = DatabaseManager(settings)
    try:
        await db.initialize()
        logger.info("Database connection pool initialized")

        await db.ping()
        logger.info("Database connectivity verified")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    app.state.db = db

    yield

    logger.info(f"Shutting down {settings.app_name}")
    try:
        await db.close()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Settings backend for the PTM BMUP community CMS",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.settings = settings

    # Middleware added last runs first
    app.add_middleware(RateLimitMiddleware, max_requests=settings.rate_limit_max_requests, skip_paths=SKIP_PATHS)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=["traceparent", "tracestate"],
    )

    register_exception_handlers(app)

    app.include_router(members_router)

    Database = Annotated[DatabaseManager, Depends(get_database)]

    @app.get("/health", tags=["Health"])
    async def health_check(db: Database) -> Dict[str, Any]:
        """Health check endpoint with database connectivity test."""
        try:
            await db.ping()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise ServiceUnavailableError("Database connection failed")

        return {
            "success": True,
            "message": "Service is healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
            "version": __version__,
            "database": "connected"
        }

    @app.get("/ready", tags=["Health"])
    async def ready_check(db: Database) -> Dict[str, Any]:
        """Readiness check endpoint."""
        try:
            connections = await db.connection_count()
        except Exception as e:
            logger.error(f"Readiness check failed: {e}")
            raise ServiceUnavailableError("Service not ready")

        return {
            "success": True,
            "status": "ready",
            "database_connections": connections
        }

    @app.get("/live", tags=["Health"])
    async def liveness_check() -> Dict[str, Any]:
        """Liveness check endpoint."""
        return {"success": True, "status": "alive"}

    @app.get("/", tags=["Root"])
    async def root() -> Dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "success": True,
            "message": settings.app_name,
            "version": __version__,
            "environment": settings.environment,
            "endpoints": {
                "health": "/health",
                "members": "/api/setting/members",
                "docs": "/docs"
            }
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()

    uvicorn.run(
        "setting_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
