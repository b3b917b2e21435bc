"""Unit tests for webhost/host/middleware.py — SecurityHeadersMiddleware.

Tests the middleware in isolation using a minimal Starlette app, so header
behaviour is verified without the site mount involved:

  - classification stored on request.state before the handler runs
  - security headers on every response, including 404 and redirects
  - cache-control only for cacheable targets
  - handler-set cache-control replaced for cacheable, kept otherwise
  - query string participates in classification
  - unhandled exceptions become a JSON 500 that still carries the headers
  - request fields bound to the log context while the handler runs
"""

from __future__ import annotations

import pytest
import structlog
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response
from starlette.routing import Route
from starlette.testclient import TestClient

from webhost.constants import CONTENT_SECURITY_POLICY, MATCH_MODE_SUFFIX
from webhost.host.middleware import SecurityHeadersMiddleware, request_target


async def _echo_classification(request: Request) -> Response:
    return JSONResponse({"classification": request.state.classification.value})


async def _with_cache_header(request: Request) -> Response:
    return PlainTextResponse("x", headers={"cache-control": "no-store"})


async def _redirect(request: Request) -> Response:
    return RedirectResponse("/posts/home")


async def _fail(request: Request) -> Response:
    raise RuntimeError("disk went away")


async def _log_context(request: Request) -> Response:
    return JSONResponse(structlog.contextvars.get_contextvars())


def _make_test_app(match_mode: str = "contains") -> Starlette:
    app = Starlette(
        routes=[
            Route("/nocache/{name}", _with_cache_header),
            Route("/go", _redirect),
            Route("/fail/{name}", _fail),
            Route("/context/{name}", _log_context),
            Route("/{path:path}", _echo_classification),
        ]
    )
    app.add_middleware(SecurityHeadersMiddleware, match_mode=match_mode)
    return app


@pytest.fixture()
def client() -> TestClient:
    return TestClient(_make_test_app())


class TestClassificationState:

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/favicon.ico", "cacheable"),
            ("/images/logo.JPG", "cacheable"),
            ("/_next/app.js", "noncacheable"),
            ("/data/posts.json", "noncacheable"),
            ("/posts/hello-world", "page"),
            ("/style.css", "page"),
        ],
    )
    def test_classification_on_request_state(
        self, client: TestClient, path: str, expected: str
    ) -> None:
        response = client.get(path)
        assert response.status_code == 200
        assert response.json() == {"classification": expected}

    def test_query_string_is_classified(self, client: TestClient) -> None:
        response = client.get("/posts/hello?cover=a.jpg")
        assert response.json() == {"classification": "cacheable"}

    def test_suffix_mode_ignores_query(self) -> None:
        client = TestClient(_make_test_app(match_mode=MATCH_MODE_SUFFIX))
        response = client.get("/posts/hello?cover=a.jpg")
        assert response.json() == {"classification": "page"}


class TestResponseHeaders:

    @pytest.mark.parametrize("path", ["/favicon.ico", "/app.js", "/posts/hello"])
    def test_security_headers_on_every_response(self, client: TestClient, path: str) -> None:
        response = client.get(path)
        assert response.headers["content-security-policy"] == CONTENT_SECURITY_POLICY
        assert response.headers["strict-transport-security"] == (
            "max-age=31536000; includeSubdomains; preload"
        )
        assert response.headers["x-frame-options"] == "DENY"
        assert response.headers["x-xss-protection"] == "1; mode=block"
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["referrer-policy"] == "same-origin"

    def test_cache_control_only_for_cacheable(self, client: TestClient) -> None:
        assert client.get("/favicon.ico").headers["cache-control"] == (
            "public, max-age=31536000, immutable"
        )
        assert "cache-control" not in client.get("/app.js").headers
        assert "cache-control" not in client.get("/posts/hello").headers

    def test_redirect_carries_security_headers(self, client: TestClient) -> None:
        response = client.get("/go", follow_redirects=False)
        assert response.status_code == 307
        assert response.headers["x-frame-options"] == "DENY"

    def test_handler_cache_control_replaced_for_cacheable(self, client: TestClient) -> None:
        response = client.get("/nocache/logo.jpg")
        assert response.headers["cache-control"] == "public, max-age=31536000, immutable"

    def test_handler_cache_control_kept_for_page(self, client: TestClient) -> None:
        response = client.get("/nocache/about")
        assert response.headers["cache-control"] == "no-store"


class TestUnhandledErrors:

    def test_exception_becomes_json_500_with_headers(self) -> None:
        client = TestClient(_make_test_app(), raise_server_exceptions=False)
        response = client.get("/fail/page")
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert response.headers["content-security-policy"] == CONTENT_SECURITY_POLICY
        assert response.headers["x-frame-options"] == "DENY"
        assert response.headers["referrer-policy"] == "same-origin"
        assert "cache-control" not in response.headers

    def test_exception_for_cacheable_target_sets_cache_control(self) -> None:
        client = TestClient(_make_test_app(), raise_server_exceptions=False)
        response = client.get("/fail/logo.jpg")
        assert response.status_code == 500
        assert response.headers["cache-control"] == "public, max-age=31536000, immutable"


class TestLogContext:

    def test_request_fields_bound_during_handler(self, client: TestClient) -> None:
        response = client.get("/context/hello")
        assert response.json() == {
            "method": "GET",
            "path": "/context/hello",
            "classification": "page",
        }


class TestRequestTarget:

    def test_target_without_query(self) -> None:
        request = Request({"type": "http", "path": "/a", "query_string": b"", "headers": []})
        assert request_target(request) == "/a"

    def test_target_with_query(self) -> None:
        request = Request(
            {"type": "http", "path": "/a", "query_string": b"x=1.js", "headers": []}
        )
        assert request_target(request) == "/a?x=1.js"
