"""Labeled gauge storage exported in the Prometheus text format."""

from .metric_set import MetricSet

__all__ = ["MetricSet"]
