"""Custom exceptions for the IServ client."""


class IServError(Exception):
    """Base exception for this project."""


class IServValidationError(IServError, ValueError):
    """Raised when a required endpoint parameter is missing."""


class ConfigurationError(IServError):
    """Raised when required settings cannot be found."""
