"""
Resilience Infrastructure Package

Retry with exponential backoff for router API calls.
"""

from .retry import ExponentialBackoff, RetryConfig, is_retryable_exception, retry_call

__all__ = [
    "RetryConfig",
    "ExponentialBackoff",
    "is_retryable_exception",
    "retry_call",
]
