"""Request classification for the static host.

Every inbound request is tagged with exactly one :class:`Classification`
before any response header is computed:

  - ``cacheable``    — images and icons; served with a one-year immutable
                       cache-control header
  - ``noncacheable`` — scripts and JSON data; security headers only
  - ``page``         — everything else; eligible for ``.html`` fallback
                       resolution when no file matches the URL

Two matching modes are supported:

  ``contains`` (default)
      Case-insensitive substring containment over the raw request target,
      query string included. ``/foo.jpgbar`` and ``/post?img=a.jpg`` are
      both ``cacheable``. This is the long-standing production behaviour.

  ``suffix``
      Case-insensitive ``endswith`` over the path component only (query
      string stripped). ``/foo.jpgbar`` is a ``page``.
"""

from __future__ import annotations

from enum import Enum

from webhost.constants import (
    CACHEABLE_EXTENSIONS,
    MATCH_MODE_CONTAINS,
    MATCH_MODE_SUFFIX,
    NONCACHEABLE_EXTENSIONS,
)


class Classification(str, Enum):
    """Request category; drives header policy and fallback resolution."""

    CACHEABLE = "cacheable"
    NONCACHEABLE = "noncacheable"
    PAGE = "page"


def _matches(path: str, extensions: tuple[str, ...], match_mode: str) -> bool:
    if match_mode == MATCH_MODE_SUFFIX:
        return path.endswith(extensions)
    return any(ext in path for ext in extensions)


def classify(request_path: str, match_mode: str = MATCH_MODE_CONTAINS) -> Classification:
    """Classify a request target by file extension.

    Args:
        request_path: Raw request target, e.g. ``/favicon.ico`` or
                      ``/posts/hello?ref=x.json``.
        match_mode:   ``"contains"`` or ``"suffix"``.

    Returns:
        The request's :class:`Classification`. Never raises.
    """
    path = request_path.lower()
    if match_mode == MATCH_MODE_SUFFIX:
        path = path.split("?", 1)[0]

    if _matches(path, CACHEABLE_EXTENSIONS, match_mode):
        return Classification.CACHEABLE
    if _matches(path, NONCACHEABLE_EXTENSIONS, match_mode):
        return Classification.NONCACHEABLE
    return Classification.PAGE
