"""Contracts implemented by the infrastructure layer."""

from .metric_set import IMetricSet
from .router_client import FetchError, IRouterClient, RouterClientError, RouterConnectionError

__all__ = [
    "IMetricSet",
    "IRouterClient",
    "RouterClientError",
    "RouterConnectionError",
    "FetchError",
]
