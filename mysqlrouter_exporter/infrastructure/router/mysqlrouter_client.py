"""
MySQL Router Client - Thin adapter for the MySQL Router REST API
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar
from urllib.parse import quote

import httpx

from ...application.interfaces.router_client import (
    FetchError,
    IRouterClient,
    RouterConnectionError,
)
from ...domain.entities import (
    ConfigNode,
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
from ...domain.exceptions import DomainException
from ..resilience.retry import RetryConfig, retry_call

logger = logging.getLogger(__name__)

API_PATH = "/api/20190715"

T = TypeVar("T")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an API timestamp such as ``2024-01-10T08:03:37.000000Z``.

    Timestamps without an offset are taken as UTC.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def _items(payload: dict[str, Any]) -> list[dict[str, Any]]:
    items = payload.get("items", [])
    if not isinstance(items, list):
        raise TypeError("'items' must be a list")
    return items


class MySQLRouterClient(IRouterClient):
    """
    Router REST API client over httpx with HTTP basic auth.

    Every transport failure, non-2xx response or malformed payload is raised
    as FetchError. Transient failures are retried per retry_config.
    """

    def __init__(
        self,
        url: str,
        user: str,
        password: str,
        timeout: float | None = 30.0,
        verify: bool = True,
        retry_config: RetryConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Build the HTTP client. No request is made until connect().

        Raises:
            RouterConnectionError: If the URL is not an http(s) URL
        """
        self.url = (url or "").rstrip("/")
        try:
            parsed = httpx.URL(self.url)
        except (httpx.InvalidURL, TypeError) as e:
            raise RouterConnectionError(self.url, "invalid URL", cause=e) from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise RouterConnectionError(self.url, "URL must be http:// or https:// with a host")

        self.retry_config = retry_config or RetryConfig()
        self._client = httpx.Client(
            base_url=f"{self.url}{API_PATH}",
            auth=httpx.BasicAuth(user, password),
            timeout=timeout,
            verify=verify,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        logger.info(f"Initialized router API client for {self.url}")

    def connect(self) -> RouterStatus:
        """
        Verify the API is reachable and the credentials are accepted.

        Raises:
            RouterConnectionError: If the router status cannot be fetched
        """
        try:
            status = self.get_router_status()
        except FetchError as e:
            raise RouterConnectionError(self.url, str(e), cause=e) from e
        logger.info(f"Connected to MySQL Router {status.version} on {status.hostname}")
        return status

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "MySQLRouterClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def get_router_status(self) -> RouterStatus:
        payload = self._get("get_router_status", "/router/status")
        return self._map(
            "get_router_status",
            None,
            lambda: RouterStatus(
                process_id=int(payload["processId"]),
                product_edition=str(payload.get("productEdition", "")),
                time_started=parse_timestamp(payload.get("timeStarted")),
                version=str(payload.get("version", "")),
                hostname=str(payload["hostname"]),
            ),
        )

    def get_all_metadata(self) -> list[MetadataEntry]:
        payload = self._get("get_all_metadata", "/metadata")
        return self._map(
            "get_all_metadata",
            None,
            lambda: [MetadataEntry(name=str(item["name"])) for item in _items(payload)],
        )

    def get_metadata_config(self, name: str) -> MetadataConfig:
        payload = self._get("get_metadata_config", f"/metadata/{quote(name, safe='')}/config", name)
        return self._map(
            "get_metadata_config",
            name,
            lambda: MetadataConfig(
                cluster_name=str(payload.get("clusterName", "")),
                time_refresh_in_ms=int(payload.get("timeRefreshInMs", 0)),
                group_replication_id=str(payload.get("groupReplicationId", "")),
                nodes=tuple(
                    ConfigNode(hostname=str(node["hostname"]), port=int(node["port"]))
                    for node in payload.get("nodes", [])
                ),
            ),
        )

    def get_metadata_status(self, name: str) -> MetadataStatus:
        payload = self._get("get_metadata_status", f"/metadata/{quote(name, safe='')}/status", name)
        return self._map(
            "get_metadata_status",
            name,
            lambda: MetadataStatus(
                refresh_failed=int(payload.get("refreshFailed", 0)),
                time_last_refresh_succeeded=parse_timestamp(
                    payload.get("timeLastRefreshSucceeded")
                ),
                last_refresh_hostname=str(payload.get("lastRefreshHostname", "")),
                last_refresh_port=int(payload.get("lastRefreshPort", 0)),
            ),
        )

    def get_all_routes(self) -> list[Route]:
        payload = self._get("get_all_routes", "/routes")
        return self._map(
            "get_all_routes",
            None,
            lambda: [Route(name=str(item["name"])) for item in _items(payload)],
        )

    def get_route_status(self, name: str) -> RouteStatus:
        payload = self._get("get_route_status", f"/routes/{quote(name, safe='')}/status", name)
        return self._map(
            "get_route_status",
            name,
            lambda: RouteStatus(
                active_connections=int(payload.get("activeConnections", 0)),
                total_connections=int(payload.get("totalConnections", 0)),
                blocked_hosts=int(payload.get("blockedHosts", 0)),
            ),
        )

    def get_route_health(self, name: str) -> RouteHealth:
        payload = self._get("get_route_health", f"/routes/{quote(name, safe='')}/health", name)
        return self._map(
            "get_route_health", name, lambda: RouteHealth(is_alive=bool(payload["isAlive"]))
        )

    def get_route_destinations(self, name: str) -> list[RouteDestination]:
        payload = self._get(
            "get_route_destinations", f"/routes/{quote(name, safe='')}/destinations", name
        )
        return self._map(
            "get_route_destinations",
            name,
            lambda: [
                RouteDestination(address=str(item["address"]), port=int(item["port"]))
                for item in _items(payload)
            ],
        )

    def get_route_connections(self, name: str) -> list[RouteConnection]:
        payload = self._get(
            "get_route_connections", f"/routes/{quote(name, safe='')}/connections", name
        )
        return self._map(
            "get_route_connections",
            name,
            lambda: [
                RouteConnection(
                    source_address=str(item.get("sourceAddress", "")),
                    destination_address=str(item.get("destinationAddress", "")),
                    bytes_from_server=int(item.get("bytesFromServer", 0)),
                    bytes_to_server=int(item.get("bytesToServer", 0)),
                    time_started=parse_timestamp(item.get("timeStarted")),
                    time_connected_to_server=parse_timestamp(item.get("timeConnectedToServer")),
                    time_last_sent_to_server=parse_timestamp(item.get("timeLastSentToServer")),
                    time_last_received_from_server=parse_timestamp(
                        item.get("timeLastReceivedFromServer")
                    ),
                )
                for item in _items(payload)
            ],
        )

    def _get(self, operation: str, path: str, target: str | None = None) -> dict[str, Any]:
        return retry_call(self._request, operation, path, target, config=self.retry_config)

    def _request(self, operation: str, path: str, target: str | None) -> dict[str, Any]:
        try:
            response = self._client.get(path)
        except httpx.HTTPError as e:
            raise FetchError(
                operation,
                target,
                reason=str(e) or type(e).__name__,
                cause=e,
                transient=isinstance(e, httpx.TransportError),
            ) from e

        if not response.is_success:
            raise FetchError(
                operation,
                target,
                reason=response.reason_phrase or None,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(
                operation, target, reason="response is not valid JSON", cause=e, transient=False
            ) from e

        if not isinstance(payload, dict):
            raise FetchError(
                operation, target, reason="response is not a JSON object", transient=False
            )
        return payload

    @staticmethod
    def _map(operation: str, target: str | None, build: Callable[[], T]) -> T:
        try:
            return build()
        except (KeyError, TypeError, ValueError, DomainException) as e:
            raise FetchError(
                operation, target, reason=f"unexpected payload: {e!s}", cause=e, transient=False
            ) from e
