"""
Repository Interfaces for the PR reviewer service.

Repository interfaces define the contract for data access, following the
Repository pattern from Domain-Driven Design. Implementations are provided
in the infrastructure layer (``database.repositories``).

This abstraction allows:
1. Swapping storage backends (SQLite -> PostgreSQL)
2. Testing the review service against fakes
3. Clear separation between domain and infrastructure
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from .aggregates import PullRequest, Team, User
from .value_objects import PullRequestShort, PullRequestStatus


class ITeamRepository(ABC):
    """Team Repository Interface."""

    @abstractmethod
    async def exists(self, team_name: str) -> bool:
        """Check if a team name is registered."""
        pass

    @abstractmethod
    async def create_with_members(self, team: Team) -> None:
        """
        Insert the team and upsert every member into it.

        A member whose user_id already exists elsewhere is moved into this
        team with the submitted username and active flag.
        """
        pass

    @abstractmethod
    async def get_by_name(self, team_name: str) -> Optional[Team]:
        """
        Get a team with its members.

        Returns:
            The team, or None when no member belongs to it (a registered
            team without members is reported as missing).
        """
        pass


class IUserRepository(ABC):
    """User Repository Interface."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[User]:
        """Get a user by id."""
        pass

    @abstractmethod
    async def set_active(self, user_id: str, is_active: bool) -> Optional[User]:
        """
        Set the active flag.

        Returns:
            The updated user, or None if the user does not exist.
        """
        pass

    @abstractmethod
    async def list_by_team(self, team_name: str) -> List[User]:
        """All members of a team, active or not."""
        pass

    @abstractmethod
    async def list_active_by_team(self, team_name: str) -> List[User]:
        """Active members of a team (the candidate pool)."""
        pass


class IPullRequestRepository(ABC):
    """Pull Request Repository Interface."""

    @abstractmethod
    async def exists(self, pull_request_id: str) -> bool:
        """Check if a pull request id is used."""
        pass

    @abstractmethod
    async def create(self, pull_request: PullRequest) -> None:
        """Insert the pull request together with its reviewer rows."""
        pass

    @abstractmethod
    async def get(self, pull_request_id: str) -> Optional[PullRequest]:
        """Get a pull request with its assigned reviewers."""
        pass

    @abstractmethod
    async def update_status(
        self,
        pull_request_id: str,
        status: PullRequestStatus,
        merged_at: Optional[datetime] = None,
    ) -> Optional[PullRequest]:
        """
        Update status (and merge timestamp when given).

        Returns:
            The updated pull request, or None if it does not exist.
        """
        pass

    @abstractmethod
    async def list_by_reviewer(self, user_id: str) -> List[PullRequestShort]:
        """Pull requests where the user is an assigned reviewer, any status."""
        pass

    @abstractmethod
    async def assign_reviewers(self, pull_request_id: str, reviewer_ids: List[str]) -> None:
        """Add reviewer rows."""
        pass

    @abstractmethod
    async def replace_reviewer(
        self,
        pull_request_id: str,
        old_reviewer_id: str,
        new_reviewer_id: str,
    ) -> bool:
        """Remove the old reviewer row and add the new one; False if there was no old row."""
        pass


class IUnitOfWork(ABC):
    """
    Unit of Work Interface.

    Coordinates repository operations within a single transaction.

    Usage:
        async with uow:
            await uow.pull_requests.create(pr)
            await uow.commit()
    """

    teams: ITeamRepository
    users: IUserRepository
    pull_requests: IPullRequestRepository

    @abstractmethod
    async def commit(self) -> None:
        """Commit all changes."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Rollback all changes."""
        pass

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        """Enter the async context."""
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context, rolling back on error."""
        pass
