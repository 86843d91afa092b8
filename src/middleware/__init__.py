"""Middleware components for the PR reviewer service.

Provides:
- Request correlation ID tracking
"""

from .correlation import (
    CorrelationIdMiddleware,
    get_correlation_id,
    set_correlation_id,
    reset_correlation_id,
)

__all__ = [
    "CorrelationIdMiddleware",
    "get_correlation_id",
    "set_correlation_id",
    "reset_correlation_id",
]
