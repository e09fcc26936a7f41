"""
Metric family catalogue.

Wire names match the long-standing exporter output so existing dashboards
and alert rules keep working; the route connection families have never
carried the ``mysqlrouter_`` prefix.
"""

from dataclasses import dataclass

from ..interfaces.metric_set import IMetricSet

NAMESPACE = "mysqlrouter"

CONNECTION_LABELS = ("name", "router_hostname", "source_address", "destination_address")
ROUTE_LABELS = ("name", "router_hostname")


@dataclass(frozen=True)
class MetricFamily:
    """A gauge family and its fixed, ordered label names."""

    name: str
    help_text: str
    label_names: tuple[str, ...] = ()


ROUTER_STATUS = MetricFamily(
    f"{NAMESPACE}_router_status",
    "MySQL Router information",
    ("process_id", "product_edition", "time_started", "version", "hostname"),
)
METADATA = MetricFamily(f"{NAMESPACE}_metadata", "metadata list", ("name",))
METADATA_CONFIG = MetricFamily(
    f"{NAMESPACE}_metadata_config",
    "metadata config",
    ("name", "cluster_name", "time_refresh_in_ms", "group_replication_id"),
)
METADATA_CONFIG_NODE = MetricFamily(
    f"{NAMESPACE}_metadata_config_node",
    "metadata config node",
    ("name", "router_host", "cluster_name", "hostname", "port"),
)
METADATA_STATUS = MetricFamily(
    f"{NAMESPACE}_metadata_status",
    "metadata status",
    (
        "name",
        "refresh_failed",
        "time_last_refresh_succeeded",
        "last_refresh_hostname",
        "last_refresh_port",
    ),
)
ROUTE = MetricFamily(f"{NAMESPACE}_route", "route name", ("name",))
ROUTE_ACTIVE_CONNECTIONS = MetricFamily(
    f"{NAMESPACE}_route_active_connections", "route active connections", ROUTE_LABELS
)
ROUTE_TOTAL_CONNECTIONS = MetricFamily(
    f"{NAMESPACE}_route_total_connections", "route total connections", ROUTE_LABELS
)
ROUTE_BLOCKED_HOSTS = MetricFamily(
    f"{NAMESPACE}_route_blocked_hosts", "route blocked_hosts", ROUTE_LABELS
)
ROUTE_HEALTH = MetricFamily(f"{NAMESPACE}_route_health", "0: not active, 1: active", ROUTE_LABELS)
ROUTE_DESTINATIONS = MetricFamily(
    f"{NAMESPACE}_route_destinations", "route destinations", ("name", "address", "port")
)
CONNECTIONS_BYTE_FROM_SERVER = MetricFamily(
    "route_connections_byte_from_server", "Route connections byte from server", CONNECTION_LABELS
)
CONNECTIONS_BYTE_TO_SERVER = MetricFamily(
    "route_connections_byte_to_server", "Route connections byte to server", CONNECTION_LABELS
)
CONNECTIONS_TIME_STARTED = MetricFamily(
    "route_connections_time_started", "Route connections time started", CONNECTION_LABELS
)
CONNECTIONS_TIME_CONNECTED_TO_SERVER = MetricFamily(
    "route_connections_time_connected_to_server",
    "Route connections time connected to server",
    CONNECTION_LABELS,
)
CONNECTIONS_TIME_LAST_SENT_TO_SERVER = MetricFamily(
    "route_connections_time_last_sent_to_server",
    "Route connections time last sent to server",
    CONNECTION_LABELS,
)
CONNECTIONS_TIME_LAST_RECEIVED_FROM_SERVER = MetricFamily(
    "route_connections_time_last_received_from_server",
    "Route connections time last received from server",
    CONNECTION_LABELS,
)

EXPORTER_LAST_CYCLE_SUCCESS = MetricFamily(
    f"{NAMESPACE}_exporter_last_cycle_success",
    "1 if the last sampling cycle completed, 0 if it was aborted",
)
EXPORTER_LAST_CYCLE_DURATION = MetricFamily(
    f"{NAMESPACE}_exporter_last_cycle_duration_seconds",
    "Duration of the last sampling cycle",
)
EXPORTER_LAST_CYCLE_TIMESTAMP = MetricFamily(
    f"{NAMESPACE}_exporter_last_cycle_timestamp_seconds",
    "Unix time the last sampling cycle ended",
)
EXPORTER_SKIPPED_ENTITIES = MetricFamily(
    f"{NAMESPACE}_exporter_skipped_entities",
    "Metadata caches and routes skipped in the last cycle because a fetch failed",
)

DATA_FAMILIES: tuple[MetricFamily, ...] = (
    ROUTER_STATUS,
    METADATA,
    METADATA_CONFIG,
    METADATA_CONFIG_NODE,
    METADATA_STATUS,
    ROUTE,
    ROUTE_ACTIVE_CONNECTIONS,
    ROUTE_TOTAL_CONNECTIONS,
    ROUTE_BLOCKED_HOSTS,
    ROUTE_HEALTH,
    ROUTE_DESTINATIONS,
    CONNECTIONS_BYTE_FROM_SERVER,
    CONNECTIONS_BYTE_TO_SERVER,
    CONNECTIONS_TIME_STARTED,
    CONNECTIONS_TIME_CONNECTED_TO_SERVER,
    CONNECTIONS_TIME_LAST_SENT_TO_SERVER,
    CONNECTIONS_TIME_LAST_RECEIVED_FROM_SERVER,
)

EXPORTER_FAMILIES: tuple[MetricFamily, ...] = (
    EXPORTER_LAST_CYCLE_SUCCESS,
    EXPORTER_LAST_CYCLE_DURATION,
    EXPORTER_LAST_CYCLE_TIMESTAMP,
    EXPORTER_SKIPPED_ENTITIES,
)

ALL_FAMILIES: tuple[MetricFamily, ...] = DATA_FAMILIES + EXPORTER_FAMILIES


def declare_families(
    metric_set: IMetricSet, families: tuple[MetricFamily, ...] = ALL_FAMILIES
) -> None:
    """Declare every family once at startup."""
    for family in families:
        metric_set.declare(family.name, family.help_text, family.label_names)
