"""Shared utilities."""

from .rate_limiter import ConcurrencyLimiter, api_limiter, with_rate_limit

__all__ = [
    "ConcurrencyLimiter",
    "api_limiter",
    "with_rate_limit",
]
