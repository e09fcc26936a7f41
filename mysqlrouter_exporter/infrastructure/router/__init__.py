"""
Router API client implementations
"""

from .mysqlrouter_client import API_PATH, MySQLRouterClient, parse_timestamp

__all__ = [
    "API_PATH",
    "MySQLRouterClient",
    "parse_timestamp",
]
