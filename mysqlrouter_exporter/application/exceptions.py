"""
Application-level exceptions raised during process bootstrap and serving.
"""

from typing import Any


class ApplicationException(Exception):
    """Base exception for application-level errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(ApplicationException):
    """Raised when required configuration is missing or invalid."""

    def __init__(self, message: str, variables: list[str] | None = None) -> None:
        super().__init__(message, {"variables": variables or []})
        self.variables = variables or []


class ServerError(ApplicationException):
    """Raised when the scrape endpoint cannot bind or stops serving."""

    def __init__(self, host: str, port: int, reason: str | None = None) -> None:
        message = f"Scrape server failed on {host}:{port}"
        if reason:
            message += f": {reason}"
        super().__init__(message, {"host": host, "port": port, "reason": reason})
        self.host = host
        self.port = port
        self.reason = reason
