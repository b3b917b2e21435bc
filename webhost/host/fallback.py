"""Fallback resolution for extensionless page URLs.

The blog build writes one pre-rendered ``<id>.html`` file per post, but
links point at ``/posts/<id>`` without the extension. For requests
classified as ``page`` that the static layer could not match directly,
:func:`resolve` decides between:

  - ``ServeFile`` — ``<physical_root>/<lowercased path>.html`` exists
  - ``Redirect``  — it does not; send the client to the fallback route
                    (``/posts/home``), whatever path was requested

The existence check is synchronous file-system I/O. Callers on the event
loop run it in a worker thread (see :mod:`webhost.host.static`).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from webhost.constants import FALLBACK_ROUTE, PAGE_EXTENSION


@dataclass(frozen=True)
class ServeFile:
    """Serve a pre-rendered page.

    path:      URL-style path relative to the physical root,
               e.g. ``/posts/hello-world.html``.
    full_path: Absolute file-system path of the same file.
    """

    path: str
    full_path: Path


@dataclass(frozen=True)
class Redirect:
    """Redirect the client to ``target``."""

    target: str


ResolvedAction = Union[ServeFile, Redirect]


def _inside_root(full_path: str, root: str) -> bool:
    return os.path.commonpath([full_path, root]) == root


def resolve(
    request_path: str,
    physical_root: Path,
    fallback_route: str = FALLBACK_ROUTE,
) -> ResolvedAction:
    """Resolve a ``page`` request to its pre-rendered file or the fallback route.

    Args:
        request_path:   URL path of the request (no query string),
                        e.g. ``/posts/Hello-World``.
        physical_root:  Directory the site is served from.
        fallback_route: Redirect target used when no file matches.

    Returns:
        ``ServeFile`` when ``<physical_root><lowercased path>.html`` is a
        regular file inside ``physical_root``, else ``Redirect(fallback_route)``.
    """
    relative = request_path.lower().lstrip("/") + PAGE_EXTENSION
    if "\x00" in relative:
        return Redirect(fallback_route)

    root = os.path.realpath(physical_root)
    full_path = os.path.realpath(os.path.join(root, relative))

    # Paths that climb out of the root (``..``, symlinks) count as missing.
    if not _inside_root(full_path, root) or not os.path.isfile(full_path):
        return Redirect(fallback_route)

    return ServeFile(path="/" + relative, full_path=Path(full_path))
