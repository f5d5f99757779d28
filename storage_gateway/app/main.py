"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from storage_gateway.app.exception_handlers import configure_exception_handlers
from storage_gateway.app.lifespan import lifespan
from storage_gateway.app.middleware import configure_middleware
from storage_gateway.app.router import setup_routers
from storage_gateway.core.settings import get_app_settings


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Settings are loaded once and cached via LRU cache.

    Returns:
        Configured FastAPI application instance.
    """
    app_settings = get_app_settings()

    app = FastAPI(
        title=app_settings.title,
        description=app_settings.description,
        version=app_settings.version,
        docs_url=app_settings.docs_url,
        openapi_url=app_settings.openapi_url,
        root_path=app_settings.root_path,
        debug=app_settings.debug,
        lifespan=lifespan,
    )

    # Configure exception handlers (must be before middleware)
    configure_exception_handlers(app)

    configure_middleware(app)

    setup_routers(app, app_settings)

    return app


# Application instance for uvicorn
app = create_app()
