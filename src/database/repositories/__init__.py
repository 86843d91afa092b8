"""Repository implementations for the PR reviewer service."""

from .team_repository import TeamRepository
from .user_repository import UserRepository
from .pull_request_repository import PullRequestRepository

__all__ = [
    "TeamRepository",
    "UserRepository",
    "PullRequestRepository",
]
