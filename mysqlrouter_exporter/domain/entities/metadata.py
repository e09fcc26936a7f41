"""
Metadata Cache Entities

A router keeps one metadata cache per InnoDB cluster it serves. Each cache
has a static config (cluster name, refresh interval, bootstrap nodes) and a
refresh status.
"""

from dataclasses import dataclass, field
from datetime import datetime

from ..exceptions import InvalidSnapshotError


@dataclass(frozen=True)
class MetadataEntry:
    """A named metadata cache."""

    name: str


@dataclass(frozen=True)
class ConfigNode:
    """A metadata server the cache refreshes from."""

    hostname: str
    port: int

    def __post_init__(self) -> None:
        if self.port < 0:
            raise InvalidSnapshotError("ConfigNode", "port", self.port, "negative")


@dataclass(frozen=True)
class MetadataConfig:
    """
    Static configuration of a metadata cache.

    Attributes:
        cluster_name: Name of the InnoDB cluster
        time_refresh_in_ms: Refresh interval (TTL) in milliseconds
        group_replication_id: Group replication UUID, empty when not reported
        nodes: Metadata servers in the order the router reports them
    """

    cluster_name: str
    time_refresh_in_ms: int
    group_replication_id: str = ""
    nodes: tuple[ConfigNode, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.time_refresh_in_ms < 0:
            raise InvalidSnapshotError(
                "MetadataConfig", "time_refresh_in_ms", self.time_refresh_in_ms, "negative"
            )


@dataclass(frozen=True)
class MetadataStatus:
    """
    Refresh status of a metadata cache.

    Attributes:
        refresh_failed: Number of failed refresh attempts
        time_last_refresh_succeeded: Time of the last successful refresh
        last_refresh_hostname: Metadata server used for the last refresh
        last_refresh_port: Port of that metadata server
    """

    refresh_failed: int
    time_last_refresh_succeeded: datetime | None
    last_refresh_hostname: str
    last_refresh_port: int
