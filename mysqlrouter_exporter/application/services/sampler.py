"""
Router Sampler

Performs one full traversal of router -> metadata caches -> routes ->
connections and projects every fetched snapshot into the metric set.

Each metadata cache and each route is fetched completely before any of its
series are written, so a failed sub-fetch never leaves a half-projected
entity behind. Series written by earlier entities in the same cycle stay.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, TypeVar

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
from ..interfaces.metric_set import IMetricSet
from ..interfaces.router_client import FetchError, IRouterClient
from . import families

logger = logging.getLogger(__name__)

T = TypeVar("T")

DATA_FAMILY_NAMES = tuple(family.name for family in families.DATA_FAMILIES)


class FailurePolicy(Enum):
    """What a failed sub-fetch does to the current cycle."""

    ABORT = "abort"  # first failure ends the cycle and is fatal to the process
    SKIP = "skip"  # failed metadata caches and routes are skipped


@dataclass
class CycleReport:
    """Summary of one completed sampling cycle."""

    router_hostname: str
    metadata_count: int = 0
    route_count: int = 0
    connection_count: int = 0
    skipped: list[str] = field(default_factory=list)
    evicted: int = 0
    duration_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "router_hostname": self.router_hostname,
            "metadata_count": self.metadata_count,
            "route_count": self.route_count,
            "connection_count": self.connection_count,
            "skipped": list(self.skipped),
            "evicted": self.evicted,
            "duration_seconds": round(self.duration_seconds, 4),
        }


@dataclass(frozen=True)
class _MetadataSnapshot:
    entry: MetadataEntry
    config: MetadataConfig
    status: MetadataStatus


@dataclass(frozen=True)
class _RouteSnapshot:
    route: Route
    status: RouteStatus
    health: RouteHealth
    destinations: list[RouteDestination]
    connections: list[RouteConnection]


def label_value(value: Any) -> str:
    """Render a snapshot field as a label value."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_epoch_millis(value: datetime | None) -> float:
    """Whole seconds since the epoch, scaled to milliseconds. None maps to 0."""
    if value is None:
        return 0.0
    return float(int(value.timestamp()) * 1000)


class Sampler:
    """
    Projects router state into a metric set, one full traversal per call.

    The router hostname fetched at the start of a cycle is reused as a label
    on every metadata, route and connection series of that cycle.

    Series are never removed between cycles unless evict_stale is enabled;
    a route that disappears keeps its last values until restart.
    """

    def __init__(
        self,
        client: IRouterClient,
        metric_set: IMetricSet,
        failure_policy: FailurePolicy = FailurePolicy.ABORT,
        evict_stale: bool = False,
    ) -> None:
        self.client = client
        self.metric_set = metric_set
        self.failure_policy = failure_policy
        self.evict_stale = evict_stale

    def sample(self) -> CycleReport:
        """
        Run one cycle.

        Returns:
            Report of what was projected

        Raises:
            FetchError: Router status or a list fetch failed, or any fetch
                failed under FailurePolicy.ABORT
        """
        logger.debug("Starting sampling cycle")
        start_time = time.perf_counter()
        if self.evict_stale:
            self.metric_set.begin_cycle()

        try:
            report = self._traverse()
        except FetchError:
            self._record_cycle(success=False, duration=time.perf_counter() - start_time)
            raise

        if self.evict_stale:
            report.evicted = self.metric_set.sweep(DATA_FAMILY_NAMES)

        report.duration_seconds = time.perf_counter() - start_time
        self._record_cycle(
            success=True, duration=report.duration_seconds, skipped=len(report.skipped)
        )
        return report

    def _traverse(self) -> CycleReport:
        router = self.client.get_router_status()
        self._project_router(router)
        report = CycleReport(router_hostname=router.hostname)

        for entry in self.client.get_all_metadata():
            snapshot = self._fetch_entity(
                report, f"metadata:{entry.name}", lambda: self._fetch_metadata(entry)
            )
            if snapshot is not None:
                self._project_metadata(snapshot, router)
                report.metadata_count += 1

        for route in self.client.get_all_routes():
            snapshot = self._fetch_entity(
                report, f"route:{route.name}", lambda: self._fetch_route(route)
            )
            if snapshot is not None:
                self._project_route(snapshot, router)
                report.route_count += 1
                report.connection_count += len(snapshot.connections)

        return report

    def _fetch_entity(self, report: CycleReport, key: str, fetch: Callable[[], T]) -> T | None:
        try:
            return fetch()
        except FetchError as e:
            if self.failure_policy is FailurePolicy.ABORT:
                raise
            logger.warning(f"Skipping {key}: {e}", extra={"entity": key})
            report.skipped.append(key)
            return None

    def _fetch_metadata(self, entry: MetadataEntry) -> _MetadataSnapshot:
        return _MetadataSnapshot(
            entry=entry,
            config=self.client.get_metadata_config(entry.name),
            status=self.client.get_metadata_status(entry.name),
        )

    def _fetch_route(self, route: Route) -> _RouteSnapshot:
        return _RouteSnapshot(
            route=route,
            status=self.client.get_route_status(route.name),
            health=self.client.get_route_health(route.name),
            destinations=self.client.get_route_destinations(route.name),
            connections=self.client.get_route_connections(route.name),
        )

    def _project_router(self, router: RouterStatus) -> None:
        # Identity only: the series exists to carry its labels.
        self.metric_set.touch(
            families.ROUTER_STATUS.name,
            [
                label_value(router.process_id),
                router.product_edition,
                label_value(router.time_started),
                router.version,
                router.hostname,
            ],
        )

    def _project_metadata(self, snapshot: _MetadataSnapshot, router: RouterStatus) -> None:
        name = snapshot.entry.name
        config = snapshot.config
        status = snapshot.status

        self.metric_set.touch(families.METADATA.name, [name])
        self.metric_set.touch(
            families.METADATA_CONFIG.name,
            [
                name,
                config.cluster_name,
                label_value(config.time_refresh_in_ms),
                config.group_replication_id,
            ],
        )
        for node in config.nodes:
            self.metric_set.touch(
                families.METADATA_CONFIG_NODE.name,
                [name, router.hostname, config.cluster_name, node.hostname, label_value(node.port)],
            )
        self.metric_set.touch(
            families.METADATA_STATUS.name,
            [
                name,
                label_value(status.refresh_failed),
                label_value(status.time_last_refresh_succeeded),
                status.last_refresh_hostname,
                label_value(status.last_refresh_port),
            ],
        )

    def _project_route(self, snapshot: _RouteSnapshot, router: RouterStatus) -> None:
        name = snapshot.route.name
        route_labels = [name, router.hostname]

        self.metric_set.touch(families.ROUTE.name, [name])

        self.metric_set.set(
            families.ROUTE_ACTIVE_CONNECTIONS.name, route_labels, snapshot.status.active_connections
        )
        self.metric_set.set(
            families.ROUTE_TOTAL_CONNECTIONS.name, route_labels, snapshot.status.total_connections
        )
        self.metric_set.set(
            families.ROUTE_BLOCKED_HOSTS.name, route_labels, snapshot.status.blocked_hosts
        )

        # Same label tuple whether alive or not, so the series toggles.
        self.metric_set.set(
            families.ROUTE_HEALTH.name, route_labels, 1.0 if snapshot.health.is_alive else 0.0
        )

        for destination in snapshot.destinations:
            self.metric_set.touch(
                families.ROUTE_DESTINATIONS.name,
                [name, destination.address, label_value(destination.port)],
            )

        for connection in snapshot.connections:
            self._project_connection(name, router.hostname, connection)

    def _project_connection(
        self, route_name: str, router_hostname: str, connection: RouteConnection
    ) -> None:
        labels = [
            route_name,
            router_hostname,
            connection.source_address,
            connection.destination_address,
        ]
        values = (
            (families.CONNECTIONS_BYTE_FROM_SERVER, float(connection.bytes_from_server)),
            (families.CONNECTIONS_BYTE_TO_SERVER, float(connection.bytes_to_server)),
            (families.CONNECTIONS_TIME_STARTED, to_epoch_millis(connection.time_started)),
            (
                families.CONNECTIONS_TIME_CONNECTED_TO_SERVER,
                to_epoch_millis(connection.time_connected_to_server),
            ),
            (
                families.CONNECTIONS_TIME_LAST_SENT_TO_SERVER,
                to_epoch_millis(connection.time_last_sent_to_server),
            ),
            (
                families.CONNECTIONS_TIME_LAST_RECEIVED_FROM_SERVER,
                to_epoch_millis(connection.time_last_received_from_server),
            ),
        )
        for family, value in values:
            self.metric_set.set(family.name, labels, value)

    def _record_cycle(self, success: bool, duration: float, skipped: int = 0) -> None:
        self.metric_set.set(families.EXPORTER_LAST_CYCLE_SUCCESS.name, [], 1.0 if success else 0.0)
        self.metric_set.set(families.EXPORTER_LAST_CYCLE_DURATION.name, [], duration)
        self.metric_set.set(families.EXPORTER_LAST_CYCLE_TIMESTAMP.name, [], time.time())
        self.metric_set.set(families.EXPORTER_SKIPPED_ENTITIES.name, [], float(skipped))
