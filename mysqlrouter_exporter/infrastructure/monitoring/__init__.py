"""
Monitoring Infrastructure Package

Structured logging for the exporter process.
"""

from .logging import (
    ExporterJSONFormatter,
    MaskingTextFormatter,
    SensitiveDataConfig,
    SensitiveDataMasker,
    setup_structured_logging,
)

__all__ = [
    "ExporterJSONFormatter",
    "MaskingTextFormatter",
    "SensitiveDataConfig",
    "SensitiveDataMasker",
    "setup_structured_logging",
]
