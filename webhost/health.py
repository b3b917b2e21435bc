"""Health endpoint for webhost.

Implements:
  GET /_webhost/health — 503 before the lifespan marks the app ready, 200 after.

Polled by container health checks and the process supervisor. The path sits
under a prefix the site build never writes to, so a pre-rendered ``/health``
page is still served by the site mount.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from webhost import __version__
from webhost.config import Config
from webhost.constants import HEALTH_PATH

router = APIRouter(tags=["health"])


@router.get(HEALTH_PATH)
async def health(request: Request) -> dict[str, Any]:
    """Report readiness and the effective site configuration.

    Response body (200):
        {
          "status": "ok",
          "version": "1.0.0",
          "physical_root": "/srv/blog/dist",
          "match_mode": "contains" | "suffix",
          "fallback_route": "/posts/home"
        }

    Response body (503):
        {"status": "starting", "message": "webhost is starting up"}
    """
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={"status": "starting", "message": "webhost is starting up"},
        )

    config: Config = request.app.state.config
    return {
        "status": "ok",
        "version": __version__,
        "physical_root": str(config.site.physical_root),
        "match_mode": config.classifier.match_mode,
        "fallback_route": config.fallback.route,
    }
