"""Config loading for webhost.

Reads `.webhost/config.yaml` (or `~/.webhost/config.yaml`).
Raises SystemExit on parse errors, missing `version` field or invalid values.
If no config file is found, returns default values (safe to run without config).

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. WEBHOST_CONFIG environment variable (if set)
  3. `.webhost/config.yaml` (working directory — for development)
  4. `~/.webhost/config.yaml` (home directory — for production deployments)

Environment variable overrides:
  WEBHOST_PORT          — overrides server.port
  WEBHOST_PHYSICAL_ROOT — overrides site.physical_root
  WEBHOST_CONFIG        — sets an explicit config file path to try first

All config objects are frozen: the physical root and port are process-start
constants and are never mutated once the app is built.
"""

from __future__ import annotations

import dataclasses
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NoReturn, Optional

import yaml

from webhost.constants import (
    DEFAULT_GZIP_MINIMUM_SIZE,
    DEFAULT_HOST,
    DEFAULT_PHYSICAL_ROOT,
    DEFAULT_PORT,
    DEFAULT_REDIRECT_STATUS,
    FALLBACK_ROUTE,
    MATCH_MODE_CONTAINS,
    VALID_MATCH_MODES,
    VALID_REDIRECT_STATUSES,
)
from webhost.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

# Default config search paths (WEBHOST_CONFIG env var prepended at runtime)
DEFAULT_CONFIG_PATHS = [
    ".webhost/config.yaml",
    os.path.expanduser("~/.webhost/config.yaml"),
]


def _resolve_root(raw_path: str) -> Path:
    return Path(os.path.expanduser(raw_path)).resolve()


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ServerConfig:
    """Listening socket configuration."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


@dataclass(frozen=True)
class SiteConfig:
    """Physical root holding the pre-rendered site.

    physical_root: absolute directory path; every file served comes from
                   inside it. Relative values are resolved against the
                   working directory at load time.
    """

    physical_root: Path = field(default_factory=lambda: _resolve_root(DEFAULT_PHYSICAL_ROOT))


@dataclass(frozen=True)
class ClassifierConfig:
    """Extension matching mode: "contains" (anywhere in the URL) | "suffix"."""

    match_mode: str = MATCH_MODE_CONTAINS


@dataclass(frozen=True)
class FallbackConfig:
    """Where missing pages are redirected to, and with which status."""

    route: str = FALLBACK_ROUTE
    redirect_status: int = DEFAULT_REDIRECT_STATUS


@dataclass(frozen=True)
class CompressionConfig:
    """Response compression (delegated to Starlette's GZipMiddleware)."""

    enabled: bool = True
    minimum_size: int = DEFAULT_GZIP_MINIMUM_SIZE


@dataclass(frozen=True)
class Config:
    """Root configuration object populated from .webhost/config.yaml.

    All fields have safe defaults — webhost can start without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    server: ServerConfig = field(default_factory=ServerConfig)
    site: SiteConfig = field(default_factory=SiteConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    fallback: FallbackConfig = field(default_factory=FallbackConfig)
    compression: CompressionConfig = field(default_factory=CompressionConfig)
    path: Optional[str] = None  # Path to the loaded config file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.

        Args:
            raw:  Parsed YAML dict (must already be validated for version field).
            path: Path to the config file.

        Returns:
            Config with all fields populated from raw + defaults for missing fields.

        Raises:
            SystemExit(1): On invalid classifier.match_mode, fallback.route or
                           fallback.redirect_status.
        """
        # ── Server ────────────────────────────────────────────────────────────
        server_raw = raw.get("server", {})
        server = ServerConfig(
            host=server_raw.get("host", DEFAULT_HOST),
            port=server_raw.get("port", DEFAULT_PORT),
        )

        # ── Site ──────────────────────────────────────────────────────────────
        site_raw = raw.get("site", {})
        site = SiteConfig(
            physical_root=_resolve_root(str(site_raw.get("physical_root", DEFAULT_PHYSICAL_ROOT))),
        )

        # ── Classifier ────────────────────────────────────────────────────────
        classifier_raw = raw.get("classifier", {})
        match_mode = classifier_raw.get("match_mode", MATCH_MODE_CONTAINS)
        if match_mode not in VALID_MATCH_MODES:
            _fail(
                f"CONFIG ERROR: Invalid classifier.match_mode: '{match_mode}'. "
                f"Supported values: {sorted(VALID_MATCH_MODES)}."
            )
        classifier = ClassifierConfig(match_mode=match_mode)

        # ── Fallback ──────────────────────────────────────────────────────────
        fallback_raw = raw.get("fallback", {})
        route = fallback_raw.get("route", FALLBACK_ROUTE)
        if not isinstance(route, str) or not route.startswith("/"):
            _fail(
                f"CONFIG ERROR: Invalid fallback.route: '{route}'. "
                "The fallback route must be an absolute path such as '/posts/home'."
            )
        redirect_status = fallback_raw.get("redirect_status", DEFAULT_REDIRECT_STATUS)
        if redirect_status not in VALID_REDIRECT_STATUSES:
            _fail(
                f"CONFIG ERROR: Invalid fallback.redirect_status: {redirect_status}. "
                f"Supported values: {sorted(VALID_REDIRECT_STATUSES)}."
            )
        fallback = FallbackConfig(route=route, redirect_status=redirect_status)

        # ── Compression ───────────────────────────────────────────────────────
        compression_raw = raw.get("compression", {})
        compression = CompressionConfig(
            enabled=compression_raw.get("enabled", True),
            minimum_size=compression_raw.get("minimum_size", DEFAULT_GZIP_MINIMUM_SIZE),
        )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            server=server,
            site=site,
            classifier=classifier,
            fallback=fallback,
            compression=compression,
            path=path,
        )


def _fail(msg: str) -> NoReturn:
    print(msg, file=sys.stderr)
    raise SystemExit(1)


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate webhost configuration.

    Search order:
      1. ``config_path`` argument (if provided — for testing or explicit override)
      2. ``WEBHOST_CONFIG`` environment variable (if set)
      3. ``.webhost/config.yaml`` (current working directory — for development)
      4. ``~/.webhost/config.yaml`` (home directory — for production deployments)

    If no file is found at any of these paths, returns default Config (not an error).
    If a file is found but invalid, writes error to stderr and raises SystemExit(1).

    After loading (or defaulting), ``WEBHOST_PORT`` and ``WEBHOST_PHYSICAL_ROOT``
    are applied as overrides regardless of whether a config file was found.

    Raises:
        SystemExit(1): On YAML parse error, missing ``version`` field, unsupported
                       version, invalid section values, or invalid ``WEBHOST_PORT``.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("WEBHOST_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.info("No config file found — using defaults", searched=search_paths)
        return _apply_env_overrides(Config.defaults())

    # ── Parse config file ─────────────────────────────────────────────────────
    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw: Any = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "webhost refuses to start with an invalid config. "
            "Check the YAML syntax and try again."
        )
    except OSError as exc:
        _fail(f"CONFIG ERROR: Could not read {found_path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            _fail(
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        _fail(
            f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version")
    if version is None:
        _fail(
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
    if version not in SUPPORTED_VERSIONS:
        _fail(
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )

    config = _apply_env_overrides(Config.from_dict(raw, path=found_path))

    if config.server.host == "0.0.0.0":
        logger.warning(
            "webhost is configured to bind on 0.0.0.0 (all interfaces). "
            "Put a TLS-terminating proxy in front of it for public traffic."
        )

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        physical_root=str(config.site.physical_root),
        match_mode=config.classifier.match_mode,
    )
    return config


def _apply_env_overrides(config: Config) -> Config:
    """Return a copy of ``config`` with environment variable overrides applied.

    Currently handles:
      WEBHOST_PORT          — server.port (integer; SystemExit(1) if invalid)
      WEBHOST_PHYSICAL_ROOT — site.physical_root

    Called for both file-loaded and default configs so env vars always take
    precedence over any file value.
    """
    env_port = os.environ.get("WEBHOST_PORT")
    if env_port is not None:
        try:
            port = int(env_port)
        except ValueError:
            _fail(
                f"CONFIG ERROR: WEBHOST_PORT environment variable is not a valid "
                f"integer: '{env_port}'"
            )
        config = dataclasses.replace(
            config, server=dataclasses.replace(config.server, port=port)
        )

    env_root = os.environ.get("WEBHOST_PHYSICAL_ROOT")
    if env_root:
        config = dataclasses.replace(
            config, site=SiteConfig(physical_root=_resolve_root(env_root))
        )

    return config
