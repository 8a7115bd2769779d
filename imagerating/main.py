#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
ImageRating — FastAPI application factory

The host wiki includes ``api.router``, ``render.router`` and ``views.router``
in its own application; ``create_app()`` serves them standalone for
development and tests.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from imagerating.core.cache import close_cache, get_cache
from imagerating.core.config import configure_logging, get_settings
from imagerating.core.database import create_all_tables, dispose_engine, init_db
from imagerating.core.templating import templates
from imagerating.hooks import register_parser_hooks
from imagerating.routes import api, render
from imagerating.ui import views

log = logging.getLogger(__name__)


# -----------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    settings = get_settings()
    configure_logging()
    init_db()
    if settings.environment != "production":
        await create_all_tables()   # safe: CREATE TABLE IF NOT EXISTS
    get_cache()
    log.info("%s %s started", settings.app_name, settings.app_version)
    yield
    await close_cache()
    await dispose_engine()


# -----------------------------------------------------------------------------

def create_app() -> FastAPI:
    settings = get_settings()
    register_parser_hooks()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Featured images, image rating and categorisation for the wiki.",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    # ── Static files ──────────────────────────────────────────────────────

    static_dir = Path(__file__).parent / "static"
    app.mount("/static/imagerating", StaticFiles(directory=str(static_dir)), name="imagerating-static")

    # ── API routers ───────────────────────────────────────────────────────

    prefix = "/api/v1"

    app.include_router(api.router,    prefix=prefix)
    app.include_router(render.router, prefix=prefix)

    # ── UI (Jinja2) router ────────────────────────────────────────────────

    app.include_router(views.router)

    # ── Global exception handlers ─────────────────────────────────────────

    @app.exception_handler(404)
    async def not_found(request: Request, exc):
        if request.url.path.startswith("/api/"):
            detail = getattr(exc, "detail", None) or "Not found"
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={"detail": detail},
            )
        return templates.TemplateResponse(
            request,
            "error.html",
            {"site_name": settings.site_name, "user": None,
             "message": "The page you requested could not be found."},
            status_code=404,
        )

    @app.exception_handler(500)
    async def server_error(request: Request, exc):
        log.exception("Unhandled error on %s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    # ── Health check ──────────────────────────────────────────────────────

    @app.get("/api/health", tags=["system"])
    async def health():
        return {"status": "ok", "version": settings.app_version, "app": settings.app_name}

    return app


# -----------------------------------------------------------------------------

app = create_app()


# -----------------------------------------------------------------------------
