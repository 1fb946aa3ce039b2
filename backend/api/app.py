"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config import get_settings
from shared.logging_config import configure_logging
from modules.auth.routes import router as auth_router

from .errors import register_exception_handlers
from .middleware.gate import RouteGateMiddleware
from .routes import health, profiles, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Fails startup when the token signing secret is missing.
    """
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level)
    settings.require_jwt_secret()
    logger.info("Starting HouseHelp API on %s:%s", settings.host, settings.port)
    yield
    # Shutdown
    logger.info("Shutting down HouseHelp API")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title="HouseHelp API",
        description="Household services marketplace: authentication and account API",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    register_exception_handlers(app)

    app.add_middleware(RouteGateMiddleware)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(profiles.router, prefix="/api", tags=["profiles"])

    return app


# Application instance for uvicorn
app = create_app()
