"""webhost FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app(config) — testable application factory
  - lifespan           — @asynccontextmanager startup/shutdown sequence
  - health router      — HEALTH_PATH, delegated to webhost/health.py
  - /                  — catch-all site mount (SiteFiles)

Request pipeline (outermost first):
  GZipMiddleware → SecurityHeadersMiddleware → router
    → HEALTH_PATH (/_webhost/health)
    → SiteFiles: file → directory index → page fallback → 404

Startup sequence:
  1. check_physical_root()  → SystemExit(1) if the site directory is missing
  2. app.state.ready = True → log "webhost ready"

There is no module-level app: webhost/run.py builds one from the config it
loaded. To drive uvicorn directly, use the factory:
  uvicorn webhost.main:create_app --factory --host 127.0.0.1 --port 3001 \\
    --limit-concurrency 100 --backlog 50 --timeout-keep-alive 5
"""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware

from webhost import __version__
from webhost.config import Config, load_config
from webhost.health import router as health_router
from webhost.host.middleware import SecurityHeadersMiddleware
from webhost.host.static import SiteFiles
from webhost.utils.logger import get_logger

logger = get_logger(__name__)


def check_physical_root(physical_root: Path) -> None:
    """Fail fast when the site directory is missing.

    Raises:
        SystemExit(1): ``physical_root`` does not exist or is not a directory.
    """
    if not physical_root.is_dir():
        msg = (
            f"STARTUP ERROR: physical root {physical_root} is not a directory.\n"
            "Build the site first, or point site.physical_root "
            "(or WEBHOST_PHYSICAL_ROOT) at the build output."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup and shutdown sequence.

    The config is attached by create_app(); the lifespan only validates the
    physical root and flips the ready flag.
    """
    config: Config = app.state.config
    logger.info("webhost starting up...")

    check_physical_root(config.site.physical_root)

    app.state.ready = True
    logger.info(
        "webhost ready",
        physical_root=str(config.site.physical_root),
        host=config.server.host,
        port=config.server.port,
        match_mode=config.classifier.match_mode,
    )

    yield

    logger.info("webhost shutting down...")
    app.state.ready = False
    logger.info("webhost shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Create and configure the webhost FastAPI application.

    Call this function directly in unit tests to get an isolated app instance:
        app = create_app(Config(site=SiteConfig(physical_root=tmp_path)))

    Args:
        config: Explicit configuration. ``load_config()`` is used when omitted.

    Returns:
        Configured FastAPI application with lifespan, middleware, health route and
        the site mount.
    """
    if config is None:
        config = load_config()

    application = FastAPI(
        title="webhost",
        description="Static blog host with security headers and cache policy",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Config is immutable after this point.
    application.state.config = config
    application.state.ready = False

    # NOTE: In Starlette, the LAST-added middleware is OUTERMOST (runs first).
    # SecurityHeadersMiddleware sees every response, including 404s rendered
    # by the exception handlers below.
    application.add_middleware(
        SecurityHeadersMiddleware,
        match_mode=config.classifier.match_mode,
    )
    if config.compression.enabled:
        application.add_middleware(
            GZipMiddleware,
            minimum_size=config.compression.minimum_size,
        )

    application.include_router(health_router)

    # Catch-all: MUST be mounted after every explicit route.
    application.mount(
        "/",
        SiteFiles(
            directory=config.site.physical_root,
            fallback_route=config.fallback.route,
            redirect_status=config.fallback.redirect_status,
            match_mode=config.classifier.match_mode,
        ),
        name="site",
    )

    # HTTP errors render as JSON here. Any other exception is rendered by
    # SecurityHeadersMiddleware, so the 500 carries the security headers too.
    @application.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers,
        )

    return application
