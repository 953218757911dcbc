"""Settings and logging configuration for the IServ client."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from iservpy.exceptions import ConfigurationError

DEFAULT_COOKIES_FILE = Path("cookies.json")

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@dataclass
class IServCredentials:
    host: str
    username: str
    password: str


@dataclass
class IServSettings:
    credentials: IServCredentials
    reuse_cookies: bool = False
    cookie_file: Path = DEFAULT_COOKIES_FILE
    debug: bool = False


def _env(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


def _env_flag(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in {"1", "true", "yes", "on"}


def load_settings(dotenv_path: str | Path | None = None) -> IServSettings:
    """
    Load client settings from environment variables.

    A ``.env`` file is read first (without overriding variables that are
    already set). Preferred keys are ``ISERV_HOST``, ``ISERV_USERNAME`` and
    ``ISERV_PASSWORD``; the bare ``host``, ``username`` and ``password``
    names are accepted as a fallback.

    Args:
        dotenv_path: Optional explicit path to a ``.env`` file

    Returns:
        IServSettings built from the environment

    Raises:
        ConfigurationError: If host, username or password is missing
    """
    load_dotenv(dotenv_path)

    host = _env("ISERV_HOST", "host")
    username = _env("ISERV_USERNAME", "username")
    password = _env("ISERV_PASSWORD", "password")

    missing = [
        name
        for name, value in (("host", host), ("username", username), ("password", password))
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"Missing IServ settings: {', '.join(missing)}. "
            "Set ISERV_HOST/ISERV_USERNAME/ISERV_PASSWORD (for example via .env)."
        )

    return IServSettings(
        credentials=IServCredentials(host=host, username=username, password=password),
        reuse_cookies=_env_flag("ISERV_REUSE_COOKIES"),
        cookie_file=Path(os.getenv("ISERV_COOKIE_FILE") or DEFAULT_COOKIES_FILE),
        debug=_env_flag("ISERV_DEBUG"),
    )


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach a stream handler to the package logger and set its level."""
    logger = logging.getLogger("iservpy")
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)
    return logger
