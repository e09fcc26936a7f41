"""
Route Entities

A route is a named listening endpoint of the router that forwards client
connections to a set of destinations.
"""

from dataclasses import dataclass
from datetime import datetime

from ..exceptions import InvalidSnapshotError


@dataclass(frozen=True)
class Route:
    """A named routing endpoint."""

    name: str


@dataclass(frozen=True)
class RouteStatus:
    """Connection counters of a route. Values are point-in-time counts."""

    active_connections: int
    total_connections: int
    blocked_hosts: int

    def __post_init__(self) -> None:
        for name in ("active_connections", "total_connections", "blocked_hosts"):
            value = getattr(self, name)
            if value < 0:
                raise InvalidSnapshotError("RouteStatus", name, value, "negative")


@dataclass(frozen=True)
class RouteHealth:
    """Liveness of a route."""

    is_alive: bool


@dataclass(frozen=True)
class RouteDestination:
    """A backend a route may forward to."""

    address: str
    port: int


@dataclass(frozen=True)
class RouteConnection:
    """
    A client connection currently forwarded by a route.

    Timestamps are None when the router has not recorded the event yet,
    e.g. a connection that never received from the server.
    """

    source_address: str
    destination_address: str
    bytes_from_server: int
    bytes_to_server: int
    time_started: datetime | None
    time_connected_to_server: datetime | None
    time_last_sent_to_server: datetime | None
    time_last_received_from_server: datetime | None
