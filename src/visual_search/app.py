"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from visual_search.config import Settings, get_settings
from visual_search.core.exceptions import register_exception_handlers
from visual_search.core.lifespan import lifespan
from visual_search.routers import health, info, search


def mount_static(app: FastAPI, settings: Settings) -> bool:
    """
    Serve the bundled frontend from the configured directory.

    Mounted last so API routes take precedence. Skipped when disabled or when
    the directory does not exist.

    Returns:
        Whether the directory was mounted
    """
    directory = Path(settings.static.directory)
    if not settings.static.enabled or not directory.is_dir():
        return False
    app.mount("/", StaticFiles(directory=directory, html=True), name="static")
    return True


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.service.name} Service",
        description="Image similarity search over a precomputed embedding collection",
        version=settings.service.version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Operations"])
    app.include_router(info.router, tags=["Operations"])
    app.include_router(search.router, tags=["Search"])

    mount_static(app, settings)

    return app
