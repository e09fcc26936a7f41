"""Sampling services: traversal of router state and the periodic driver."""

from .context import cycle_context, get_cycle_id
from .families import ALL_FAMILIES, DATA_FAMILIES, EXPORTER_FAMILIES, MetricFamily, declare_families
from .sampler import CycleReport, FailurePolicy, Sampler
from .scheduler import Scheduler

__all__ = [
    "MetricFamily",
    "ALL_FAMILIES",
    "DATA_FAMILIES",
    "EXPORTER_FAMILIES",
    "declare_families",
    "FailurePolicy",
    "CycleReport",
    "Sampler",
    "Scheduler",
    "cycle_context",
    "get_cycle_id",
]
