"""Unit tests for default binding and the uvicorn entry point constants.

Verifies that:
  - Default Config binds to 127.0.0.1:3001
  - 0.0.0.0 is accepted when configured explicitly (a warning is logged)
  - run.py hardened uvicorn constants
  - run.main() loads the config once and hands uvicorn an app built from it
  - --config is passed through to load_config()
"""

from __future__ import annotations

from typing import Any

import pytest
from fastapi import FastAPI

from webhost import run
from webhost.config import Config, ServerConfig
from webhost.run import UVICORN_BACKLOG, UVICORN_LIMIT_CONCURRENCY, UVICORN_TIMEOUT_KEEP_ALIVE


class TestDefaultBinding:

    def test_default_host_is_loopback(self) -> None:
        assert Config.defaults().server.host == "127.0.0.1"

    def test_default_port_is_3001(self) -> None:
        assert Config.defaults().server.port == 3001

    def test_all_interfaces_is_accepted(self) -> None:
        config = Config(server=ServerConfig(host="0.0.0.0"))
        assert config.server.host == "0.0.0.0"


class TestUvicornHardenedDefaults:

    def test_limit_concurrency_is_100(self) -> None:
        assert UVICORN_LIMIT_CONCURRENCY == 100

    def test_backlog_is_50(self) -> None:
        assert UVICORN_BACKLOG == 50

    def test_timeout_keep_alive_is_5(self) -> None:
        assert UVICORN_TIMEOUT_KEEP_ALIVE == 5


class TestMain:

    @pytest.fixture()
    def uvicorn_calls(self, monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
        calls: list[dict[str, Any]] = []

        def fake_run(app: Any, **kwargs: Any) -> None:
            calls.append({"app": app, **kwargs})

        monkeypatch.setattr(run.uvicorn, "run", fake_run)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("DEBUG", raising=False)
        return calls

    def test_main_runs_uvicorn_with_config(
        self, monkeypatch: pytest.MonkeyPatch, uvicorn_calls: list[dict[str, Any]]
    ) -> None:
        config = Config(server=ServerConfig(host="0.0.0.0", port=8081))
        loads: list[Any] = []

        def fake_load_config(config_path: Any = None) -> Config:
            loads.append(config_path)
            return config

        monkeypatch.setattr(run, "load_config", fake_load_config)

        run.main([])

        assert loads == [None]
        assert len(uvicorn_calls) == 1
        call = uvicorn_calls[0]
        app = call.pop("app")
        assert isinstance(app, FastAPI)
        assert app.state.config is config
        assert call == {
            "host": "0.0.0.0",
            "port": 8081,
            "log_level": "info",
            "limit_concurrency": 100,
            "backlog": 50,
            "timeout_keep_alive": 5,
        }

    def test_config_flag_is_passed_to_load_config(
        self, monkeypatch: pytest.MonkeyPatch, uvicorn_calls: list[dict[str, Any]]
    ) -> None:
        loads: list[Any] = []

        def fake_load_config(config_path: Any = None) -> Config:
            loads.append(config_path)
            return Config()

        monkeypatch.setattr(run, "load_config", fake_load_config)

        run.main(["--config", "site.yaml"])

        assert loads == ["site.yaml"]
        assert uvicorn_calls[0]["app"].state.config == Config()
