"""Shared constants for webhost.

Header values, extension sets and process defaults used across modules are
defined here. No magic strings in other modules — import from here.
"""

# ─── Process defaults ────────────────────────────────────────────────────────

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 3001

# Relative to the working directory the host is started from (the build
# writes its output next to the webhost checkout).
DEFAULT_PHYSICAL_ROOT: str = "../dist"

# ─── Classification ──────────────────────────────────────────────────────────

# Checked first: a path matching both sets is cacheable.
CACHEABLE_EXTENSIONS: tuple[str, ...] = (".jpg", ".ico")
NONCACHEABLE_EXTENSIONS: tuple[str, ...] = (".js", ".json")

MATCH_MODE_CONTAINS: str = "contains"
MATCH_MODE_SUFFIX: str = "suffix"
VALID_MATCH_MODES: frozenset[str] = frozenset({MATCH_MODE_CONTAINS, MATCH_MODE_SUFFIX})

# ─── Security headers ────────────────────────────────────────────────────────

CONTENT_SECURITY_POLICY_DIRECTIVES: tuple[str, ...] = (
    "default-src 'none'",
    "script-src 'self'",
    "connect-src 'self'",
    "child-src 'self'",
    "img-src 'self'",
    "style-src 'self'",
    "object-src 'none'",
    "frame-ancestors 'none'",
    "base-uri 'self'",
    "form-action 'self'",
)
CONTENT_SECURITY_POLICY: str = "; ".join(CONTENT_SECURITY_POLICY_DIRECTIVES)

STRICT_TRANSPORT_SECURITY: str = "max-age=31536000; includeSubdomains; preload"

# Sent only for cacheable responses (images, icons).
IMMUTABLE_CACHE_CONTROL: str = "public, max-age=31536000, immutable"

# ─── Fallback ────────────────────────────────────────────────────────────────

PAGE_EXTENSION: str = ".html"
FALLBACK_ROUTE: str = "/posts/home"
DEFAULT_REDIRECT_STATUS: int = 302

# Directory URLs without a trailing slash (permanent, like express.static).
DIRECTORY_REDIRECT_STATUS: int = 301
VALID_REDIRECT_STATUSES: frozenset[int] = frozenset({301, 302, 303, 307, 308})

# ─── Compression ─────────────────────────────────────────────────────────────

# Responses smaller than this are sent uncompressed.
DEFAULT_GZIP_MINIMUM_SIZE: int = 1024

# ─── Health ──────────────────────────────────────────────────────────────────
# Under a prefix the site build never writes to, so no page is shadowed.
HEALTH_PATH: str = "/_webhost/health"
