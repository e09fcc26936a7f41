"""Router state snapshots fetched once per sampling cycle."""

from .metadata import ConfigNode, MetadataConfig, MetadataEntry, MetadataStatus
from .route import Route, RouteConnection, RouteDestination, RouteHealth, RouteStatus
from .router import RouterStatus

__all__ = [
    "RouterStatus",
    "MetadataEntry",
    "MetadataConfig",
    "MetadataStatus",
    "ConfigNode",
    "Route",
    "RouteStatus",
    "RouteHealth",
    "RouteDestination",
    "RouteConnection",
]
