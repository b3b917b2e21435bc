"""Security and cache header policy for every response the host sends.

The six security headers are fixed and identical for every classification.
``cache-control`` is added only for :attr:`Classification.CACHEABLE`
responses; scripts, JSON and pages get no cache directive at all so that a
new deploy is picked up on the next request.

Header constants live in :mod:`webhost.constants` so there is a single
source of truth — tests compare against the same values byte for byte.
"""

from __future__ import annotations

from typing import MutableMapping, TypeVar

from webhost.constants import (
    CONTENT_SECURITY_POLICY,
    IMMUTABLE_CACHE_CONTROL,
    STRICT_TRANSPORT_SECURITY,
)
from webhost.host.classifier import Classification

# ─── Constants ────────────────────────────────────────────────────────────────

# Applied in this order to every response, regardless of classification.
SECURITY_HEADERS: tuple[tuple[str, str], ...] = (
    ("content-security-policy", CONTENT_SECURITY_POLICY),
    ("strict-transport-security", STRICT_TRANSPORT_SECURITY),
    ("x-frame-options", "DENY"),
    ("x-xss-protection", "1; mode=block"),
    ("x-content-type-options", "nosniff"),
    ("referrer-policy", "same-origin"),
)

CACHE_CONTROL_HEADER: str = "cache-control"

HeadersT = TypeVar("HeadersT", bound=MutableMapping[str, str])

# ─── Public API ───────────────────────────────────────────────────────────────


def build_response_headers(classification: Classification) -> dict[str, str]:
    """Return the ordered header set for a classification.

    Always contains the six security headers; contains ``cache-control`` iff
    ``classification`` is ``cacheable``.
    """
    headers = dict(SECURITY_HEADERS)
    if classification is Classification.CACHEABLE:
        headers[CACHE_CONTROL_HEADER] = IMMUTABLE_CACHE_CONTROL
    return headers


def apply_headers(classification: Classification, response_headers: HeadersT) -> HeadersT:
    """Write the header policy for ``classification`` into ``response_headers``.

    Existing values for the same names are overwritten. Works with any
    mutable str → str mapping (Starlette ``MutableHeaders``, plain ``dict``).

    Returns:
        ``response_headers`` itself, after mutation.
    """
    for name, value in build_response_headers(classification).items():
        response_headers[name] = value
    return response_headers
