"""
Router Client Interface - Defines the contract for reading router state
"""

# Standard library imports
from abc import abstractmethod
from typing import Protocol

# Local imports
from ...domain.entities import (
    MetadataConfig,
    MetadataEntry,
    MetadataStatus,
    Route,
    RouteConnection,
    RouteDestination,
    RouteHealth,
    RouterStatus,
    RouteStatus,
)


class RouterClientError(Exception):
    """Base exception for router client operations."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class RouterConnectionError(RouterClientError):
    """Raised when the client cannot be constructed or cannot reach the router."""

    def __init__(self, url: str, reason: str | None = None, cause: Exception | None = None) -> None:
        message = f"Failed to connect to router API at {url}"
        if reason:
            message += f": {reason}"
        super().__init__(message, cause)
        self.url = url
        self.reason = reason


class FetchError(RouterClientError):
    """Raised when a single router API call fails during a cycle."""

    def __init__(
        self,
        operation: str,
        target: str | None = None,
        reason: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
        transient: bool | None = None,
    ) -> None:
        message = f"Router fetch '{operation}' failed"
        if target:
            message += f" for '{target}'"
        if status_code is not None:
            message += f" (HTTP {status_code})"
        if reason:
            message += f": {reason}"
        super().__init__(message, cause)
        self.operation = operation
        self.target = target
        self.reason = reason
        self.status_code = status_code
        if transient is None:
            transient = status_code is None or status_code >= 500
        self.transient = transient

    @property
    def is_transient(self) -> bool:
        """
        True if repeating the call may succeed.

        Unless set explicitly, transport failures (no status code) and 5xx
        responses are transient. Malformed payloads are raised with
        transient=False.
        """
        return self.transient


class IRouterClient(Protocol):
    """
    Read-only access to a router's runtime state.

    Every method may raise FetchError.
    """

    @abstractmethod
    def get_router_status(self) -> RouterStatus:
        """Get process identity of the router."""
        ...

    @abstractmethod
    def get_all_metadata(self) -> list[MetadataEntry]:
        """List metadata caches."""
        ...

    @abstractmethod
    def get_metadata_config(self, name: str) -> MetadataConfig:
        """Get the static config of one metadata cache."""
        ...

    @abstractmethod
    def get_metadata_status(self, name: str) -> MetadataStatus:
        """Get the refresh status of one metadata cache."""
        ...

    @abstractmethod
    def get_all_routes(self) -> list[Route]:
        """List routes."""
        ...

    @abstractmethod
    def get_route_status(self, name: str) -> RouteStatus:
        """Get the connection counters of one route."""
        ...

    @abstractmethod
    def get_route_health(self, name: str) -> RouteHealth:
        """Get the liveness of one route."""
        ...

    @abstractmethod
    def get_route_destinations(self, name: str) -> list[RouteDestination]:
        """List the destinations of one route."""
        ...

    @abstractmethod
    def get_route_connections(self, name: str) -> list[RouteConnection]:
        """List the live connections of one route."""
        ...
