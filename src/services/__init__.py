"""
Services for the PR reviewer service.

- review_service: review workflow orchestration
- logging_config: application logging setup
"""

from .review_service import ReviewService, get_review_service, reset_review_service
from .logging_config import configure_logging, JsonFormatter, ReadableFormatter

__all__ = [
    "ReviewService",
    "get_review_service",
    "reset_review_service",
    "configure_logging",
    "JsonFormatter",
    "ReadableFormatter",
]
