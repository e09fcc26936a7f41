"""
Tests for process assembly and exit codes.
"""

import signal
import sys

import pytest

from mysqlrouter_exporter.application.config import ExporterConfig
from mysqlrouter_exporter.application.interfaces.router_client import FetchError
from mysqlrouter_exporter.application.services import ALL_FAMILIES, FailurePolicy
from mysqlrouter_exporter.main import (
    EXIT_CONFIGURATION,
    EXIT_FAILURE,
    build_exporter,
    main,
)
from tests.helpers.process import run_until_signal


def make_config(**overrides) -> ExporterConfig:
    values = {
        "url": "http://127.0.0.1:1",
        "user": "monitor",
        "password": "s3cret",
        "host": "127.0.0.1",
        "port": 0,
        "interval_seconds": 0.05,
    }
    values.update(overrides)
    return ExporterConfig(**values)


class TestBuildExporter:
    """Test assembly of the exporter."""

    def test_families_declared(self, router_client):
        """Test that every family is declared once at startup."""
        exporter = build_exporter(make_config(), client=router_client)

        assert exporter.metric_set.families() == [family.name for family in ALL_FAMILIES]

    def test_shared_metric_set(self, router_client):
        """Test that the sampler writes the set the server reads."""
        exporter = build_exporter(make_config(), client=router_client)

        assert exporter.sampler.metric_set is exporter.metric_set
        assert exporter.scheduler.sampler is exporter.sampler

    def test_policy_passed_through(self, router_client):
        """Test that the failure policy and eviction reach the sampler and scheduler."""
        exporter = build_exporter(
            make_config(failure_policy=FailurePolicy.SKIP, evict_stale=True), client=router_client
        )

        assert exporter.sampler.failure_policy is FailurePolicy.SKIP
        assert exporter.sampler.evict_stale is True
        assert exporter.scheduler.failure_policy is FailurePolicy.SKIP
        assert exporter.scheduler.interval_seconds == 0.05

    def test_fatal_cycle_stops_server(self, router_client):
        """Test that a failed cycle under the abort policy ends run() with the error."""
        router_client.fail("get_route_status", "route1")
        exporter = build_exporter(make_config(), client=router_client)

        with pytest.raises(FetchError) as exc_info:
            exporter.run()

        assert exc_info.value.operation == "get_route_status"
        assert exporter.scheduler.is_running is False


RUN_SCRIPT = """
from mysqlrouter_exporter.application.config import ExporterConfig
from mysqlrouter_exporter.main import build_exporter
from tests.helpers.fakes import build_fixture_client

config = ExporterConfig(
    url="http://127.0.0.1:1",
    user="monitor",
    password="s3cret",
    host="127.0.0.1",
    port=0,
    interval_seconds=0.05,
)
exporter = build_exporter(config, build_fixture_client())
exporter.server.bind()
print(exporter.server.port, flush=True)
exporter.run()
print("cycles completed:", exporter.scheduler.cycles_completed > 0, flush=True)
print("scheduler running:", exporter.scheduler.is_running, flush=True)
"""


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
class TestSignalStop:
    """Test stopping a running exporter with a signal."""

    def test_sigterm_returns_from_run(self):
        """Test that SIGTERM stops sampling and run() returns without error."""
        returncode, stdout, stderr = run_until_signal(RUN_SCRIPT, signal.SIGTERM)

        assert returncode == 0, stderr
        assert "cycles completed: True" in stdout
        assert "scheduler running: False" in stdout


class TestMain:
    """Test exit codes of the entry point."""

    def test_missing_configuration(self, clean_env, capsys):
        """Test that missing variables exit with the configuration code."""
        assert main() == EXIT_CONFIGURATION

        assert "MYSQLROUTER_EXPORTER_URL" in capsys.readouterr().err

    def test_invalid_configuration(self, clean_env):
        """Test that an invalid value exits with the configuration code."""
        clean_env.setenv("MYSQLROUTER_EXPORTER_URL", "http://127.0.0.1:1")
        clean_env.setenv("MYSQLROUTER_EXPORTER_USER", "monitor")
        clean_env.setenv("MYSQLROUTER_EXPORTER_PASS", "s3cret")
        clean_env.setenv("MYSQLROUTER_EXPORTER_PORT", "not-a-port")

        assert main() == EXIT_CONFIGURATION

    def test_unreachable_router(self, clean_env, restore_root_logger):
        """Test that a router that cannot be reached at startup is fatal."""
        clean_env.setenv("MYSQLROUTER_EXPORTER_URL", "http://127.0.0.1:1")
        clean_env.setenv("MYSQLROUTER_EXPORTER_USER", "monitor")
        clean_env.setenv("MYSQLROUTER_EXPORTER_PASS", "s3cret")
        clean_env.setenv("MYSQLROUTER_EXPORTER_TIMEOUT", "2")

        assert main() == EXIT_FAILURE

    def test_invalid_router_url(self, clean_env, restore_root_logger):
        """Test that a non-http router URL is fatal."""
        clean_env.setenv("MYSQLROUTER_EXPORTER_URL", "ftp://router.example")
        clean_env.setenv("MYSQLROUTER_EXPORTER_USER", "monitor")
        clean_env.setenv("MYSQLROUTER_EXPORTER_PASS", "s3cret")

        assert main() == EXIT_FAILURE
