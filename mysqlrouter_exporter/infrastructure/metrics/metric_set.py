"""
Metric Set backed by prometheus_client

Gauge families live in a private CollectorRegistry owned by the process's
composition root, so nothing is registered on the global default registry.
Per-series updates are atomic (prometheus_client locks each child); the
family table and eviction tracking are guarded by an RLock.
"""

import logging
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from ..exceptions_infrastructure import (
    DuplicateMetricError,
    InvalidLabelCardinality,
    UnknownMetricError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Family:
    name: str
    label_names: tuple[str, ...]
    gauge: Gauge


class MetricSet:
    """
    Named gauge families keyed by fixed, ordered label names.

    Last write wins per label tuple. Series are created on first use and are
    only ever removed by sweep().
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry(auto_describe=True)
        self._families: dict[str, _Family] = {}
        self._lock = threading.RLock()
        self._tracking = False
        self._written: set[tuple[str, tuple[str, ...]]] = set()

    def declare(self, name: str, help_text: str, label_names: Sequence[str]) -> None:
        """
        Register a gauge family. The label names are fixed thereafter.

        Raises:
            DuplicateMetricError: If the name is already declared
        """
        with self._lock:
            if name in self._families:
                raise DuplicateMetricError(name)
            labels = tuple(label_names)
            gauge = Gauge(name, help_text, labelnames=labels, registry=self.registry)
            self._families[name] = _Family(name=name, label_names=labels, gauge=gauge)

    def set(self, name: str, label_values: Sequence[Any], value: float) -> None:
        """
        Set (overwrite) the value of one series, creating it on first use.

        Raises:
            UnknownMetricError: If the family is not declared
            InvalidLabelCardinality: If the value count differs from the label count
        """
        family, values = self._resolve(name, label_values)
        if family.label_names:
            family.gauge.labels(*values).set(float(value))
        else:
            family.gauge.set(float(value))
        self._mark(name, values)

    def touch(self, name: str, label_values: Sequence[Any]) -> None:
        """
        Create a series at zero, or leave an existing one as it is.

        Used for identity series whose labels are the information.
        """
        family, values = self._resolve(name, label_values)
        if family.label_names:
            family.gauge.labels(*values)
        self._mark(name, values)

    def get(self, name: str, label_values: Sequence[Any]) -> float | None:
        """Current value of one series, or None if the series does not exist."""
        family, values = self._resolve(name, label_values)
        return self.registry.get_sample_value(name, dict(zip(family.label_names, values)))

    def series(self, name: str) -> list[tuple[str, ...]]:
        """Label tuples of every series in a family."""
        family = self._family(name)
        result = []
        for metric in family.gauge.collect():
            for sample in metric.samples:
                result.append(tuple(sample.labels[label] for label in family.label_names))
        return result

    def families(self) -> list[str]:
        with self._lock:
            return list(self._families)

    def remove(self, name: str, label_values: Sequence[Any]) -> bool:
        """Remove one series. Returns False if it did not exist."""
        family, values = self._resolve(name, label_values)
        if not family.label_names:
            return False
        try:
            family.gauge.remove(*values)
        except KeyError:
            return False
        return True

    def begin_cycle(self) -> None:
        """Start recording which series are written, for a later sweep()."""
        with self._lock:
            self._tracking = True
            self._written.clear()

    def sweep(self, names: Iterable[str] | None = None) -> int:
        """
        Remove series of the given families not written since begin_cycle().

        Families without labels are never swept.

        Returns:
            Number of series removed
        """
        with self._lock:
            if not self._tracking:
                return 0
            targets = list(names) if names is not None else list(self._families)
            removed = 0
            for name in targets:
                family = self._family(name)
                if not family.label_names:
                    continue
                for values in self.series(name):
                    if (name, values) not in self._written and self.remove(name, values):
                        removed += 1
            self._tracking = False
            self._written.clear()

        if removed:
            logger.info(f"Evicted {removed} stale series")
        return removed

    def render(self) -> bytes:
        """Current state in the Prometheus text exposition format."""
        return generate_latest(self.registry)

    def _family(self, name: str) -> _Family:
        with self._lock:
            family = self._families.get(name)
        if family is None:
            raise UnknownMetricError(name)
        return family

    def _resolve(self, name: str, label_values: Sequence[Any]) -> tuple[_Family, tuple[str, ...]]:
        family = self._family(name)
        if len(label_values) != len(family.label_names):
            raise InvalidLabelCardinality(name, family.label_names, label_values)
        return family, tuple(str(value) for value in label_values)

    def _mark(self, name: str, values: tuple[str, ...]) -> None:
        with self._lock:
            if self._tracking:
                self._written.add((name, values))
