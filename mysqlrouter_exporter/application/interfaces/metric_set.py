"""
Metric Set Interface - Labeled gauge storage shared by sampler and exporter
"""

from abc import abstractmethod
from collections.abc import Sequence
from typing import Any, Protocol


class IMetricSet(Protocol):
    """
    Registry of named gauge families keyed by fixed, ordered label names.

    One writer (the sampler) and any number of concurrent readers.
    """

    @abstractmethod
    def declare(self, name: str, help_text: str, label_names: Sequence[str]) -> None:
        """
        Register a gauge family.

        Raises:
            DuplicateMetricError: If the name is already declared
        """
        ...

    @abstractmethod
    def set(self, name: str, label_values: Sequence[Any], value: float) -> None:
        """
        Set the value of one series, creating it on first use.

        Raises:
            InvalidLabelCardinality: If the value count differs from the label count
        """
        ...

    @abstractmethod
    def touch(self, name: str, label_values: Sequence[Any]) -> None:
        """Create or refresh an identity-only series without changing its value."""
        ...

    @abstractmethod
    def begin_cycle(self) -> None:
        """Start tracking which series are written."""
        ...

    @abstractmethod
    def sweep(self, names: Sequence[str] | None = None) -> int:
        """Remove series of the named families not written since begin_cycle().

        Returns:
            Number of series removed
        """
        ...
