"""Root test configuration for webhost.

Provides a miniature pre-rendered site (``site_root``) laid out the way the
blog build writes it, and clears the WEBHOST_* environment overrides so a
developer's shell settings never leak into config tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from webhost.config import Config, SiteConfig


@pytest.fixture(autouse=True)
def clear_webhost_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove WEBHOST_* overrides for every test (tests set them explicitly)."""
    for name in ("WEBHOST_PORT", "WEBHOST_CONFIG", "WEBHOST_PHYSICAL_ROOT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def site_root(tmp_path: Path) -> Path:
    """Build a small pre-rendered site:

        dist/
          index.html
          favicon.ico
          images/logo.jpg
          _next/app.js
          data/posts.json
          style.css
          posts/home.html
          posts/hello-world.html
          about/index.html
    """
    root = tmp_path / "dist"
    (root / "posts").mkdir(parents=True)
    (root / "images").mkdir()
    (root / "_next").mkdir()
    (root / "data").mkdir()
    (root / "about").mkdir()

    (root / "index.html").write_text("<h1>index</h1>")
    (root / "favicon.ico").write_bytes(b"\x00\x00\x01\x00")
    (root / "images" / "logo.jpg").write_bytes(b"\xff\xd8\xff\xe0jpeg")
    (root / "_next" / "app.js").write_text("console.log('app');")
    (root / "data" / "posts.json").write_text('{"posts": ["hello-world"]}')
    (root / "style.css").write_text("body { margin: 0; }")
    (root / "posts" / "home.html").write_text("<h1>home</h1>")
    (root / "posts" / "hello-world.html").write_text("<h1>Hello World</h1>")
    (root / "about" / "index.html").write_text("<h1>about</h1>")
    return root


@pytest.fixture()
def site_config(site_root: Path) -> Config:
    """Default Config pointed at ``site_root``."""
    return Config(site=SiteConfig(physical_root=site_root))
