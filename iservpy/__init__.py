"""IServ portal client - Session management and API client."""

from iservpy.api_client import IServAPIClient
from iservpy.config import IServCredentials, IServSettings, configure_logging, load_settings
from iservpy.exceptions import ConfigurationError, IServError, IServValidationError
from iservpy.session_manager import IServSession, load_cookies, save_cookies

__all__ = [
    "IServAPIClient",
    "IServSession",
    "IServCredentials",
    "IServSettings",
    "IServError",
    "IServValidationError",
    "ConfigurationError",
    "configure_logging",
    "load_settings",
    "save_cookies",
    "load_cookies",
]
