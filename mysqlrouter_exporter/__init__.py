"""
MySQL Router Prometheus exporter.

Polls the MySQL Router REST API on a fixed cadence and republishes the
router, metadata cache and route state as labeled gauges.
"""

__version__ = "1.0.0"
