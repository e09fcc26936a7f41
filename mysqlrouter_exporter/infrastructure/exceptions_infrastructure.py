"""
Infrastructure-specific exception hierarchy for the exporter.

This module provides exceptions for metric registry errors. Router API
errors live with the router client interface in the application layer.
"""

from collections.abc import Sequence
from typing import Any


class InfrastructureException(Exception):
    """Base exception for all infrastructure-level errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


# ============================================================================
# Metrics Exceptions
# ============================================================================


class MetricsException(InfrastructureException):
    """Base exception for metric registry errors."""

    pass


class DuplicateMetricError(MetricsException):
    """Raised when a metric family is declared twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Metric family '{name}' is already declared", {"name": name})
        self.name = name


class UnknownMetricError(MetricsException):
    """Raised when writing to or reading from an undeclared family."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Metric family '{name}' is not declared", {"name": name})
        self.name = name


class InvalidLabelCardinality(MetricsException):
    """Raised when the number of label values differs from the declared label names."""

    def __init__(self, name: str, label_names: Sequence[str], label_values: Sequence[Any]) -> None:
        message = (
            f"Metric family '{name}' expects {len(label_names)} label values "
            f"({', '.join(label_names) or 'none'}), got {len(label_values)}"
        )
        details = {
            "name": name,
            "label_names": list(label_names),
            "label_values": [str(v) for v in label_values],
        }
        super().__init__(message, details)
        self.name = name
        self.expected = len(label_names)
        self.actual = len(label_values)
