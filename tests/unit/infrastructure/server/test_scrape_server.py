"""
Tests for the scrape server.
"""

import signal
import socket
import sys
import threading
import time

import httpx
import pytest
from fastapi.testclient import TestClient
from prometheus_client import CONTENT_TYPE_LATEST

from mysqlrouter_exporter.application.exceptions import ServerError
from mysqlrouter_exporter.infrastructure.server import METRICS_PATH, ScrapeServer, create_app
from tests.helpers.process import run_until_signal


@pytest.fixture
def client(metric_set):
    return TestClient(create_app(metric_set))


class TestScrapeApp:
    """Test the HTTP endpoints."""

    def test_metrics_content_type(self, client):
        """Test that /metrics uses the Prometheus exposition content type."""
        response = client.get(METRICS_PATH)

        assert response.status_code == 200
        assert response.headers["content-type"] == CONTENT_TYPE_LATEST

    def test_metrics_reflects_metric_set(self, client, metric_set):
        """Test that each scrape reads the current state."""
        metric_set.set("mysqlrouter_route_active_connections", ["route1", "r1"], 3)

        body = client.get(METRICS_PATH).text

        assert "# TYPE mysqlrouter_route_active_connections gauge" in body
        assert 'mysqlrouter_route_active_connections{name="route1",router_hostname="r1"} 3.0' in body

        metric_set.set("mysqlrouter_route_active_connections", ["route1", "r1"], 0)

        body = client.get(METRICS_PATH).text
        assert 'mysqlrouter_route_active_connections{name="route1",router_hostname="r1"} 0.0' in body

    def test_index_links_metrics(self, client):
        """Test the landing page."""
        response = client.get("/")

        assert response.status_code == 200
        assert f'href="{METRICS_PATH}"' in response.text

    def test_docs_disabled(self, client):
        """Test that no API docs are served."""
        assert client.get("/docs").status_code == 404
        assert client.get("/openapi.json").status_code == 404


class TestScrapeServer:
    """Test binding and serving."""

    def test_bind_failure(self, metric_set):
        """Test that an address in use raises ServerError."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
            holder.bind(("127.0.0.1", 0))
            holder.listen()
            port = holder.getsockname()[1]

            server = ScrapeServer(create_app(metric_set), "127.0.0.1", port)
            with pytest.raises(ServerError) as exc_info:
                server.bind()

        assert exc_info.value.port == port
        assert exc_info.value.host == "127.0.0.1"

    def test_bind_ephemeral_port(self, metric_set):
        """Test that the bound port is recorded."""
        server = ScrapeServer(create_app(metric_set), "127.0.0.1", 0)

        server.bind()
        try:
            assert server.port > 0
        finally:
            server.close()

    def test_serve_and_shutdown(self, metric_set):
        """Test a real scrape over uvicorn and a clean shutdown."""
        server = ScrapeServer(create_app(metric_set), "127.0.0.1", 0)
        server.bind()
        errors: list[Exception] = []

        def run():
            try:
                server.serve()
            except Exception as e:
                errors.append(e)

        thread = threading.Thread(target=run, daemon=True)
        thread.start()

        response = None
        deadline = time.monotonic() + 10.0
        while time.monotonic() < deadline:
            try:
                response = httpx.get(f"http://127.0.0.1:{server.port}{METRICS_PATH}")
                break
            except httpx.TransportError:
                time.sleep(0.05)

        server.shutdown()
        thread.join(timeout=10.0)

        assert response is not None
        assert response.status_code == 200
        assert "mysqlrouter_exporter_last_cycle_success" in response.text
        assert not thread.is_alive()
        assert errors == []

    def test_shutdown_before_serve(self, metric_set):
        """Test that a shutdown requested before serving stops the server at once."""
        server = ScrapeServer(create_app(metric_set), "127.0.0.1", 0)
        server.bind()

        server.shutdown()
        server.serve()

        assert server._socket is None


SERVE_SCRIPT = """
from mysqlrouter_exporter.infrastructure.metrics import MetricSet
from mysqlrouter_exporter.infrastructure.server import ScrapeServer, create_app

server = ScrapeServer(create_app(MetricSet()), "127.0.0.1", 0)
server.bind()
print(server.port, flush=True)
server.serve()
print("stopped by", server.exit_signal.name, flush=True)
"""


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
class TestSignalShutdown:
    """Test that a signal ends serve() instead of killing the process."""

    @pytest.mark.parametrize("sig", [signal.SIGTERM, signal.SIGINT])
    def test_serve_returns_on_signal(self, sig):
        """Test that serve() returns and the process exits normally."""
        returncode, stdout, stderr = run_until_signal(SERVE_SCRIPT, sig)

        assert returncode == 0, stderr
        assert f"stopped by {sig.name}" in stdout
        assert "KeyboardInterrupt" not in stderr
