"""
Domain-level exceptions for the exporter.

Raised while building or validating router snapshots.
"""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class InvalidSnapshotError(DomainException):
    """Raised when a snapshot field fails validation."""

    def __init__(self, entity_type: str, field: str, value: Any, reason: str) -> None:
        super().__init__(
            f"{entity_type}.{field} is invalid: {reason}",
            details={"entity_type": entity_type, "field": field, "value": value},
        )
        self.entity_type = entity_type
        self.field = field
        self.value = value
