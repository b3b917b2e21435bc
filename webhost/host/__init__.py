"""webhost request pipeline.

Public API:
  - classify()                  — path → Classification
  - build_response_headers()    — Classification → ordered header dict
  - apply_headers()             — write the header policy into a response
  - resolve()                   — page path → ServeFile | Redirect
  - SecurityHeadersMiddleware   — per-request classification + header injection
  - SiteFiles                   — static delivery with page fallback
"""

from __future__ import annotations

from webhost.host.classifier import Classification, classify
from webhost.host.fallback import Redirect, ResolvedAction, ServeFile, resolve
from webhost.host.headers import SECURITY_HEADERS, apply_headers, build_response_headers
from webhost.host.middleware import SecurityHeadersMiddleware
from webhost.host.static import SiteFiles

__all__ = [
    "Classification",
    "classify",
    "SECURITY_HEADERS",
    "build_response_headers",
    "apply_headers",
    "Redirect",
    "ResolvedAction",
    "ServeFile",
    "resolve",
    "SecurityHeadersMiddleware",
    "SiteFiles",
]
