"""
Domain layer for the PR reviewer service.

This module contains the domain models, value objects, the reviewer
assignment policy, the error taxonomy and repository interfaces.
"""

from .value_objects import (
    PullRequestStatus,
    PullRequestShort,
    TeamMember,
)
from .aggregates import (
    PullRequest,
    ReassignResult,
    Team,
    User,
    utc_now,
)
from .errors import ErrorKind, ReviewError
from .assignment import MAX_REVIEWERS, ReviewerAssignmentPolicy
from .repositories import (
    IPullRequestRepository,
    ITeamRepository,
    IUnitOfWork,
    IUserRepository,
)

__all__ = [
    # Value objects
    "PullRequestStatus",
    "PullRequestShort",
    "TeamMember",
    # Aggregates
    "PullRequest",
    "ReassignResult",
    "Team",
    "User",
    "utc_now",
    # Errors
    "ErrorKind",
    "ReviewError",
    # Policy
    "MAX_REVIEWERS",
    "ReviewerAssignmentPolicy",
    # Repository interfaces
    "IPullRequestRepository",
    "ITeamRepository",
    "IUnitOfWork",
    "IUserRepository",
]
