"""Tests for settings and logging configuration."""

import logging
from pathlib import Path

import pytest

from iservpy import ConfigurationError, configure_logging, load_settings
from iservpy.config import DEFAULT_COOKIES_FILE

ENV_NAMES = [
    "ISERV_HOST",
    "ISERV_USERNAME",
    "ISERV_PASSWORD",
    "ISERV_REUSE_COOKIES",
    "ISERV_COOKIE_FILE",
    "ISERV_DEBUG",
    "host",
    "username",
    "password",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove IServ settings from the environment, restoring them afterwards."""
    for name in ENV_NAMES:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    return monkeypatch


class TestLoadSettings:
    """Test environment-based settings."""

    def test_load_from_environment(self, clean_env, tmp_path: Path):
        clean_env.setenv("ISERV_HOST", "school.example")
        clean_env.setenv("ISERV_USERNAME", "alice")
        clean_env.setenv("ISERV_PASSWORD", "secret")

        settings = load_settings(tmp_path / ".env")

        assert settings.credentials.host == "school.example"
        assert settings.credentials.username == "alice"
        assert settings.credentials.password == "secret"
        assert settings.reuse_cookies is False
        assert settings.cookie_file == DEFAULT_COOKIES_FILE
        assert settings.debug is False

    def test_bare_names_fallback(self, clean_env, tmp_path: Path):
        clean_env.setenv("host", "school.example")
        clean_env.setenv("username", "alice")
        clean_env.setenv("password", "secret")

        settings = load_settings(tmp_path / ".env")

        assert settings.credentials.host == "school.example"
        assert settings.credentials.username == "alice"

    def test_load_from_dotenv_file(self, clean_env, tmp_path: Path):
        dotenv_file = tmp_path / ".env"
        dotenv_file.write_text(
            "ISERV_HOST=school.example\n"
            "ISERV_USERNAME=alice\n"
            "ISERV_PASSWORD=secret\n"
            "ISERV_REUSE_COOKIES=yes\n"
            "ISERV_COOKIE_FILE=state/cookies.json\n"
            "ISERV_DEBUG=1\n",
            encoding="utf-8",
        )

        settings = load_settings(dotenv_file)

        assert settings.credentials.host == "school.example"
        assert settings.reuse_cookies is True
        assert settings.cookie_file == Path("state/cookies.json")
        assert settings.debug is True

    def test_missing_settings_raise(self, clean_env, tmp_path: Path):
        clean_env.setenv("ISERV_HOST", "school.example")

        with pytest.raises(ConfigurationError, match="username, password"):
            load_settings(tmp_path / ".env")


class TestConfigureLogging:
    """Test package logging setup."""

    def test_configure_logging_sets_level_once(self):
        logger = configure_logging(logging.DEBUG)
        handlers = list(logger.handlers)
        configure_logging(logging.WARNING)

        assert logger.name == "iservpy"
        assert logger.level == logging.WARNING
        assert logger.handlers == handlers
        assert len(handlers) == 1
