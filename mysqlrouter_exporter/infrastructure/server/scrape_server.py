"""
Scrape Server

FastAPI application exposing the metric set at /metrics, served by uvicorn
on a socket bound up front so bind failures surface before any sampling
starts.
"""

import contextlib
import logging
import signal
import socket
import threading
from collections.abc import Generator
from types import FrameType

import uvicorn
from uvicorn.server import HANDLED_SIGNALS
from fastapi import FastAPI, Response
from fastapi.responses import HTMLResponse
from prometheus_client import CONTENT_TYPE_LATEST

from ...application.exceptions import ServerError
from ..metrics.metric_set import MetricSet

logger = logging.getLogger(__name__)

METRICS_PATH = "/metrics"

_INDEX_PAGE = """<html>
<head><title>MySQL Router Exporter</title></head>
<body>
<h1>MySQL Router Exporter</h1>
<p><a href="{path}">Metrics</a></p>
</body>
</html>
"""


def create_app(metric_set: MetricSet) -> FastAPI:
    """Build the scrape application. Handlers only read the metric set."""
    app = FastAPI(
        title="MySQL Router Exporter",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.get(METRICS_PATH)
    def metrics() -> Response:
        """Current metric set in the Prometheus text format."""
        return Response(content=metric_set.render(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/", response_class=HTMLResponse)
    def index() -> str:
        return _INDEX_PAGE.format(path=METRICS_PATH)

    return app


class _ExporterServer(uvicorn.Server):
    """
    uvicorn server that treats SIGINT and SIGTERM as a clean shutdown.

    uvicorn re-raises captured signals once serving stops. This server only
    records the first one, so run() returns and the caller decides the exit.
    """

    def __init__(self, config: uvicorn.Config) -> None:
        super().__init__(config)
        self.exit_signal: int | None = None

    @contextlib.contextmanager
    def capture_signals(self) -> Generator[None, None, None]:
        if threading.current_thread() is not threading.main_thread():
            yield
            return
        original_handlers = {sig: signal.signal(sig, self.handle_exit) for sig in HANDLED_SIGNALS}
        try:
            yield
        finally:
            for sig, handler in original_handlers.items():
                signal.signal(sig, handler)

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        if self.exit_signal is None:
            self.exit_signal = sig
        super().handle_exit(sig, frame)


class ScrapeServer:
    """Runs a FastAPI app under uvicorn on a pre-bound socket."""

    def __init__(self, app: FastAPI, host: str, port: int, log_level: str = "warning") -> None:
        self.app = app
        self.host = host
        self.port = port
        self.log_level = log_level.lower()
        self._socket: socket.socket | None = None
        self._server: _ExporterServer | None = None
        self._exit_requested = False
        self.exit_signal: signal.Signals | None = None

    def bind(self) -> None:
        """
        Bind the listen socket.

        Raises:
            ServerError: If the address cannot be bound
        """
        if self._socket is not None:
            return
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
        except OSError as e:
            sock.close()
            raise ServerError(self.host, self.port, str(e)) from e
        sock.set_inheritable(True)
        self._socket = sock
        self.port = sock.getsockname()[1]
        logger.info(f"listen: {self.host}:{self.port}")

    def serve(self) -> None:
        """
        Serve until shutdown() is called or a signal stops uvicorn.

        Raises:
            ServerError: If the server fails to start
        """
        if self._socket is None:
            self.bind()

        config = uvicorn.Config(
            self.app,
            log_level=self.log_level,
            access_log=False,
            log_config=None,
        )
        self._server = _ExporterServer(config)
        self._server.should_exit = self._exit_requested
        try:
            self._server.run(sockets=[self._socket])
        finally:
            self.close()

        if not self._server.started:
            raise ServerError(self.host, self.port, "server failed to start")

        if self._server.exit_signal is not None:
            self.exit_signal = signal.Signals(self._server.exit_signal)
            logger.info(f"Scrape server stopped by {self.exit_signal.name}")

    def shutdown(self) -> None:
        """Ask the server to exit, or not to start. Safe to call from any thread."""
        self._exit_requested = True
        if self._server is not None:
            self._server.should_exit = True

    def close(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None
