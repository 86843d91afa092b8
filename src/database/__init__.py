"""
Database Layer for the PR reviewer service.

This module provides:
- SQLAlchemy ORM models (schema for create_all and Alembic)
- Async database engine with connection pooling
- Repositories and the Unit of Work pattern
"""

from .models import (
    Base,
    TeamRecord,
    UserRecord,
    PullRequestRecord,
    PullRequestReviewerRecord,
)

__all__ = [
    "Base",
    "TeamRecord",
    "UserRecord",
    "PullRequestRecord",
    "PullRequestReviewerRecord",
]
