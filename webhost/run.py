"""Programmatic uvicorn entry point for webhost.

Loads the config once, builds the app from it and hands the instance to
uvicorn with hardened defaults:

  --limit-concurrency 100  Max 100 concurrent connections; HTTP 503 when exceeded
  --backlog 50             OS connection queue depth
  --timeout-keep-alive 5   Reduces the Slow Loris attack window

Usage:
    webhost                          # via pyproject.toml [project.scripts]
    webhost --config site.yaml       # explicit config file
    python -m webhost.run

A port that is already bound is fatal: uvicorn logs the error and the
process exits non-zero. There is no retry.
"""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

import uvicorn

from webhost.config import load_config
from webhost.main import create_app
from webhost.utils.logger import configure_from_env, get_logger

logger = get_logger(__name__)

# ─── Uvicorn hardened defaults ───────────────────────────────────────────────

UVICORN_LIMIT_CONCURRENCY: int = 100

UVICORN_BACKLOG: int = 50

UVICORN_TIMEOUT_KEEP_ALIVE: int = 5


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="webhost",
        description="Serve a pre-rendered blog with security headers and page fallback",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Config file to try before WEBHOST_CONFIG and .webhost/config.yaml",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Start the webhost server with hardened uvicorn defaults.

    Raises:
        SystemExit: Propagated from load_config() on config errors, or from
                    the lifespan when the physical root is missing.
    """
    args = parse_args(argv)
    log_level = configure_from_env()
    config = load_config(args.config)

    logger.info(
        "Starting webhost",
        host=config.server.host,
        port=config.server.port,
        config_path=config.path,
    )

    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level=log_level.lower(),
        limit_concurrency=UVICORN_LIMIT_CONCURRENCY,
        backlog=UVICORN_BACKLOG,
        timeout_keep_alive=UVICORN_TIMEOUT_KEEP_ALIVE,
    )


if __name__ == "__main__":
    main()
