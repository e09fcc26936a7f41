"""Global pytest configuration and fixtures."""

import logging
import os

import pytest

from mysqlrouter_exporter.application.services import declare_families
from mysqlrouter_exporter.infrastructure.metrics import MetricSet
from tests.helpers import FakeRouterClient, build_fixture_client

ENV_PREFIX = "MYSQLROUTER_EXPORTER_"


@pytest.fixture
def metric_set() -> MetricSet:
    """Metric set with every exporter family declared."""
    metrics = MetricSet()
    declare_families(metrics)
    return metrics


@pytest.fixture
def router_client() -> FakeRouterClient:
    """Router client serving the single router / cache / route fixture."""
    return build_fixture_client()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove exporter variables inherited from the outer environment."""
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX) or key in ("LOG_LEVEL", "LOG_FORMAT"):
            monkeypatch.delenv(key, raising=False)
    yield monkeypatch
    # load_dotenv writes straight into os.environ
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            del os.environ[key]


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test runner configured it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    httpx_level = logging.getLogger("httpx").level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)
