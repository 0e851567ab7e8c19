"""
FastAPI application factory for the extension field gateway.

This module creates the FastAPI app with:
- CORS configuration
- Engine component lifecycle (registry, store, adapters)
- AttributeGroup routes demonstrating extension fields end to end
- Error mapping for engine exceptions
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..errors import ExtensionStorageError, ExtFieldsError, SchemaDefinitionError
from ..plugins.base import PluginRegistry
from .config import Settings
from .routes import router
from .services import build_services


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build engine components for the application's lifetime."""
    app.state.services = build_services(app.state.settings, app.state.plugins)
    yield


async def extfields_error_handler(request: Request, exc: ExtFieldsError) -> JSONResponse:
    """Map engine errors to HTTP responses."""
    if isinstance(exc, (ExtensionStorageError, SchemaDefinitionError)):
        status_code = 500
    else:
        status_code = 400
    return JSONResponse(
        status_code=status_code,
        content={"code": exc.code, "message": exc.message, "details": exc.details},
    )


def create_app(settings: Settings | None = None, plugins: PluginRegistry | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Gateway settings (default: from environment)
        plugins: Plugin registry (default: loaded from settings.plugins)
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Extension Fields Gateway",
        description="AttributeGroup API carrying plugin-declared extension fields.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.plugins = plugins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ExtFieldsError, extfields_error_handler)

    # API routes
    app.include_router(router, prefix="/api/v1")

    @app.get("/health")
    async def health():
        return {"status": "healthy", "service": "extfields-gateway"}

    return app
