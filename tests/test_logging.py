"""Tests for logging setup — configure calls are patched, nothing global changes."""

from __future__ import annotations

from unittest.mock import patch

import structlog

from composerdiff.core.logging import setup_logging


def _configure(level=None):
    with (
        patch("composerdiff.core.logging.structlog.configure") as configure,
        patch("composerdiff.core.logging.logging.config.dictConfig") as dict_config,
    ):
        setup_logging(level)
    return configure.call_args.kwargs, dict_config.call_args.args[0]


class TestSetupLogging:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("COMPOSERDIFF_LOG_LEVEL", raising=False)
        monkeypatch.delenv("COMPOSERDIFF_LOG_FORMAT", raising=False)
        _, config = _configure()
        assert config["root"]["level"] == "INFO"
        assert config["loggers"]["composerdiff"]["level"] == "INFO"
        assert config["handlers"]["default"]["stream"] == "ext://sys.stderr"
        renderer = config["formatters"]["structlog"]["processors"][-1]
        assert isinstance(renderer, structlog.dev.ConsoleRenderer)

    def test_explicit_level_beats_env(self, monkeypatch):
        monkeypatch.setenv("COMPOSERDIFF_LOG_LEVEL", "warning")
        _, config = _configure("debug")
        assert config["loggers"]["composerdiff"]["level"] == "DEBUG"

    def test_env_level_and_json_format(self, monkeypatch):
        monkeypatch.setenv("COMPOSERDIFF_LOG_LEVEL", "warning")
        monkeypatch.setenv("COMPOSERDIFF_LOG_FORMAT", "JSON")
        kwargs, config = _configure()
        assert config["root"]["level"] == "WARNING"
        renderer = config["formatters"]["structlog"]["processors"][-1]
        assert isinstance(renderer, structlog.processors.JSONRenderer)
        assert kwargs["wrapper_class"] is structlog.stdlib.BoundLogger

    def test_http_libraries_are_quiet(self):
        _, config = _configure("debug")
        assert config["loggers"]["httpx"]["level"] == "WARNING"
        assert config["loggers"]["httpcore"]["level"] == "WARNING"
