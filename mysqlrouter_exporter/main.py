"""
Exporter entry point.

Wires the metric set, router client, sampler, scheduler and scrape server
together. The metric set is the only state the sampling thread and the
scrape handlers share.

Exit codes:
    0: Server stopped by a signal
    1: Router unreachable at startup, sampling failed, or the server failed
    2: Configuration missing or invalid
"""

import logging
import sys
from dataclasses import dataclass

from .application.config import ExporterConfig, load_config
from .application.exceptions import ConfigurationError, ServerError
from .application.interfaces.router_client import IRouterClient, RouterConnectionError
from .application.services import Sampler, Scheduler, declare_families
from .infrastructure.metrics import MetricSet
from .infrastructure.monitoring import setup_structured_logging
from .infrastructure.resilience import RetryConfig
from .infrastructure.router import MySQLRouterClient
from .infrastructure.server import ScrapeServer, create_app

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION = 2


@dataclass
class Exporter:
    """The assembled process: one sampling thread and one scrape server."""

    config: ExporterConfig
    metric_set: MetricSet
    client: IRouterClient
    sampler: Sampler
    scheduler: Scheduler
    server: ScrapeServer

    def run(self) -> None:
        """
        Bind, start sampling, and serve until stopped.

        Raises:
            ServerError: If the scrape server cannot bind or start
            Exception: The error that stopped the sampling thread
        """
        self.server.bind()
        self.scheduler.start()
        try:
            self.server.serve()
        finally:
            self.scheduler.stop()

        if self.scheduler.fatal_error is not None:
            raise self.scheduler.fatal_error

    def _on_fatal(self, error: BaseException) -> None:
        self.server.shutdown()


def create_client(config: ExporterConfig) -> MySQLRouterClient:
    """
    Build the router API client. Makes no network calls.

    Raises:
        RouterConnectionError: If the router URL is invalid
    """
    return MySQLRouterClient(
        config.url,
        config.user,
        config.password,
        timeout=config.timeout_seconds,
        verify=config.tls_verify,
        retry_config=RetryConfig(max_retries=config.fetch_retries),
    )


def build_exporter(config: ExporterConfig, client: IRouterClient) -> Exporter:
    """Assemble an exporter around a router client."""
    metric_set = MetricSet()
    declare_families(metric_set)

    sampler = Sampler(
        client,
        metric_set,
        failure_policy=config.failure_policy,
        evict_stale=config.evict_stale,
    )
    scheduler = Scheduler(
        sampler,
        interval_seconds=config.interval_seconds,
        failure_policy=config.failure_policy,
    )
    server = ScrapeServer(create_app(metric_set), config.host, config.port)

    exporter = Exporter(
        config=config,
        metric_set=metric_set,
        client=client,
        sampler=sampler,
        scheduler=scheduler,
        server=server,
    )
    scheduler.on_fatal = exporter._on_fatal
    return exporter


def main() -> int:
    try:
        config = load_config()
    except ConfigurationError as e:
        print(f"mysqlrouter-exporter: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION

    setup_structured_logging(config.log_level, config.log_format)
    logger.info(
        f"Starting exporter for {config.url}",
        extra={
            "listen": config.listen_address,
            "interval_seconds": config.interval_seconds,
            "failure_policy": config.failure_policy.value,
        },
    )

    try:
        client = create_client(config)
    except RouterConnectionError as e:
        logger.critical(str(e))
        return EXIT_FAILURE

    with client:
        try:
            client.connect()
        except RouterConnectionError as e:
            logger.critical(str(e))
            return EXIT_FAILURE

        try:
            build_exporter(config, client).run()
        except ServerError as e:
            logger.critical(str(e))
            return EXIT_FAILURE
        except Exception as e:
            logger.critical(f"Exporter stopped: {e}")
            return EXIT_FAILURE

    logger.info("Exporter stopped")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
