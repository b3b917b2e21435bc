"""Static delivery of the pre-rendered site.

:class:`SiteFiles` extends Starlette's ``StaticFiles`` with the lookup order
the blog needs. For each GET/HEAD request:

  1. A regular file at the URL path is served as-is (images, scripts, JSON,
     ``.html`` requested explicitly). Conditional requests get 304s.
  2. A directory containing ``index.html`` is served as that index;
     directory URLs without a trailing slash get a 301 to the slash form.
  3. ``page`` requests go through the fallback resolver: the pre-rendered
     ``.html`` file if present, else a redirect to the fallback route.
  4. Anything else ends in an explicit 404.

A redirect that points back at the current path (the fallback page itself
was never rendered) is answered with 404 instead of looping the client.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path

import anyio
import anyio.to_thread
from starlette.datastructures import URL
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

from webhost.constants import (
    DEFAULT_REDIRECT_STATUS,
    DIRECTORY_REDIRECT_STATUS,
    FALLBACK_ROUTE,
    MATCH_MODE_CONTAINS,
)
from webhost.host.classifier import Classification, classify
from webhost.host.fallback import Redirect, resolve
from webhost.host.middleware import request_target
from webhost.utils.logger import get_logger

logger = get_logger(__name__)

_INDEX_FILE = "index.html"


class SiteFiles(StaticFiles):
    """Serve the physical root, falling back to pre-rendered pages and redirects.

    Args:
        directory:       Physical root.
        fallback_route:  Redirect target for missing pages.
        redirect_status: Status code used for that redirect.
        match_mode:      Classifier mode, used only when the request did not
                         pass through ``SecurityHeadersMiddleware``.
    """

    def __init__(
        self,
        directory: Path,
        fallback_route: str = FALLBACK_ROUTE,
        redirect_status: int = DEFAULT_REDIRECT_STATUS,
        match_mode: str = MATCH_MODE_CONTAINS,
    ) -> None:
        # check_dir is deferred to lifespan startup so create_app() stays
        # importable without a built site.
        super().__init__(directory=directory, html=False, check_dir=False)
        self.physical_root = Path(directory)
        self.fallback_route = fallback_route
        self.redirect_status = redirect_status
        self.match_mode = match_mode

    def lookup_path(self, path: str) -> tuple[str, os.stat_result | None]:
        """Like StaticFiles.lookup_path, but unservable names are simply missing.

        Over-long components (ENAMETOOLONG), embedded NUL bytes and similar
        raise from ``os.stat``; those URLs can never name a file in the build.
        """
        try:
            return super().lookup_path(path)
        except PermissionError:
            raise
        except (OSError, ValueError) as exc:
            logger.debug("Unservable path treated as missing", error=str(exc))
            return "", None

    def _classification(self, scope: Scope) -> Classification:
        request = Request(scope)
        classification = getattr(request.state, "classification", None)
        if classification is None:
            classification = classify(request_target(request), self.match_mode)
        return classification

    async def get_response(self, path: str, scope: Scope) -> Response:
        """Serve the file at ``path``, else an index, else the page fallback, else 404."""
        try:
            return await super().get_response(path, scope)
        except HTTPException as exc:
            if exc.status_code != 404:
                raise

        index = await self._index_response(path, scope)
        if index is not None:
            return index

        if self._classification(scope) is not Classification.PAGE:
            raise HTTPException(status_code=404)

        return await self._page_response(scope)

    async def _index_response(self, path: str, scope: Scope) -> Response | None:
        full_path, stat_result = await anyio.to_thread.run_sync(self.lookup_path, path)
        if stat_result is None or not stat.S_ISDIR(stat_result.st_mode):
            return None

        index_path, stat_result = await anyio.to_thread.run_sync(
            self.lookup_path, os.path.join(path, _INDEX_FILE)
        )
        if stat_result is None or not stat.S_ISREG(stat_result.st_mode):
            return None

        if not scope["path"].endswith("/"):
            url = URL(scope=scope)
            return RedirectResponse(
                url=url.replace(path=url.path + "/"),
                status_code=DIRECTORY_REDIRECT_STATUS,
            )
        return self.file_response(index_path, stat_result, scope)

    async def _page_response(self, scope: Scope) -> Response:
        request_path = Request(scope).url.path
        action = await anyio.to_thread.run_sync(
            resolve, request_path, self.physical_root, self.fallback_route
        )

        if isinstance(action, Redirect):
            if action.target.lower() == request_path.lower():
                logger.warning("Fallback page is missing", fallback_route=action.target)
                raise HTTPException(status_code=404)
            logger.info("Page not pre-rendered — redirecting", target=action.target)
            return RedirectResponse(url=action.target, status_code=self.redirect_status)

        try:
            stat_result = await anyio.to_thread.run_sync(os.stat, action.full_path)
        except FileNotFoundError:
            # Removed between the existence check and the stat (redeploy).
            return RedirectResponse(url=self.fallback_route, status_code=self.redirect_status)

        logger.debug("Serving pre-rendered page", file=action.path)
        return self.file_response(action.full_path, stat_result, scope)
