"""
FastAPI Application Factory
---------------------------
Builds the application: settings, logging, routers, middleware, exception
handlers and the service container lifecycle.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

from trustgate.api import (
    auth_endpoints,
    health_endpoints,
    kyc_endpoints,
    user_endpoints,
)
from trustgate.api.error_handling import register_exception_handlers
from trustgate.core.config_manager import ApplicationSettings, load_settings
from trustgate.core.container import ServiceContainer
from trustgate.core.logger_setup import configure_logger


def create_app(
    settings: Optional[ApplicationSettings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Application settings; loaded from the environment when omitted
        container: Pre-built services. When omitted the lifespan connects to
            PostgreSQL and Redis and builds the container itself.
    """
    if settings is None:
        settings = container.settings if container is not None else load_settings()
    configure_logger(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if container is not None:
            yield
            return

        logger.info(f"Connecting backing stores for {settings.app_name} v{settings.app_version}")
        app.state.container = await ServiceContainer.build(settings)
        try:
            yield
        finally:
            await app.state.container.close()
            logger.info("Backing stores released")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Authentication, session management and KYC onboarding",
        lifespan=lifespan,
        debug=settings.debug,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        swagger_ui_parameters={"displayRequestDuration": True},
    )

    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_endpoints.router)
    app.include_router(auth_endpoints.router)
    app.include_router(user_endpoints.router)
    app.include_router(kyc_endpoints.router)

    # Uploaded KYC media
    app.mount(
        settings.media_base_url,
        StaticFiles(directory=settings.media_root, check_dir=False),
        name="media",
    )

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "docs": app.docs_url,
        }

    return app
