"""Tests for logging configuration."""

import logging
import logging.handlers

import pytest
import structlog

from storefront.utils.logging import configure_logging, get_log_level


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    configure_logging("test")


class TestGetLogLevel:
    @pytest.mark.parametrize(
        "env, level",
        [
            ("production", "INFO"),
            ("staging", "INFO"),
            ("development", "DEBUG"),
            ("test", "WARNING"),
            ("unknown", "INFO"),
        ],
    )
    def test_level_by_environment(self, monkeypatch, env, level):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert get_log_level(env) == level

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert get_log_level("development") == "ERROR"

    def test_reads_environment_when_not_given(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("STOREFRONT_ENV", "production")
        assert get_log_level() == "INFO"


class TestConfigureLogging:
    def test_console_only_by_default(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        configure_logging("development")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_log_dir_adds_rotating_files(self, tmp_path):
        configure_logging("production", log_dir=str(tmp_path / "logs"))

        handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert sorted(h.baseFilename.rsplit("/", 1)[-1] for h in handlers) == [
            "storefront.log",
            "storefront_error.log",
        ]
        for handler in handlers:
            handler.close()

    def test_production_renders_json(self):
        configure_logging("production")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_development_renders_console(self):
        configure_logging("development")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_test_environment_does_not_cache_loggers(self):
        configure_logging("test")
        assert structlog.get_config()["cache_logger_on_first_use"] is False
