"""Unit of Work Pattern Implementation.

Coordinates multiple repository operations as a single transaction.
Team creation with member upserts, pull request creation with reviewer
rows, and reviewer replacement each run inside one UnitOfWork.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from domain.repositories import (
    IUnitOfWork,
    ITeamRepository,
    IUserRepository,
    IPullRequestRepository,
)
from database.async_engine import get_async_session_factory
from database.repositories import (
    TeamRepository,
    UserRepository,
    PullRequestRepository,
)

logger = logging.getLogger(__name__)


class UnitOfWork(IUnitOfWork):
    """
    Unit of Work implementation using SQLAlchemy async sessions.

    Usage:
        async with UnitOfWork() as uow:
            await uow.pull_requests.create(pr)
            await uow.commit()

    The context manager automatically handles:
    - Creating a database session
    - Committing on clean exit
    - Rolling back on exception (including cancellation)
    - Closing the session
    """

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ):
        """
        Initialize the unit of work.

        Args:
            session: Optional existing session. If None, creates a new one.
            session_factory: Factory used when no session is given. Defaults
                to the global factory from database.async_engine.
        """
        self._session: Optional[AsyncSession] = session
        self._session_factory = session_factory
        self._owns_session: bool = session is None
        self._committed: bool = False

        # Lazy-initialized repositories
        self._teams: Optional[TeamRepository] = None
        self._users: Optional[UserRepository] = None
        self._pull_requests: Optional[PullRequestRepository] = None

    @property
    def session(self) -> AsyncSession:
        """Get the underlying session."""
        if self._session is None:
            raise RuntimeError("UnitOfWork not initialized. Use 'async with' context.")
        return self._session

    @property
    def teams(self) -> ITeamRepository:
        """Get the team repository."""
        if self._teams is None:
            self._teams = TeamRepository(self.session)
        return self._teams

    @property
    def users(self) -> IUserRepository:
        """Get the user repository."""
        if self._users is None:
            self._users = UserRepository(self.session)
        return self._users

    @property
    def pull_requests(self) -> IPullRequestRepository:
        """Get the pull request repository."""
        if self._pull_requests is None:
            self._pull_requests = PullRequestRepository(self.session)
        return self._pull_requests

    async def commit(self) -> None:
        """Commit the transaction. A second call is a no-op."""
        if self._committed:
            return

        await self.session.commit()
        self._committed = True
        logger.debug("UnitOfWork committed")

    async def rollback(self) -> None:
        """Discard all pending changes."""
        if self._session is None:
            return

        await self._session.rollback()
        logger.debug("UnitOfWork rolled back")

    async def __aenter__(self) -> "UnitOfWork":
        """Enter the async context."""
        if self._session is None:
            factory = self._session_factory or get_async_session_factory()
            self._session = factory()
            self._owns_session = True

        self._committed = False
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """
        Exit the async context.

        Commits if no exception, rolls back otherwise.
        Always closes the session if we own it.
        """
        try:
            if exc_type is not None:
                await self.rollback()
                logger.debug(f"UnitOfWork rolled back due to: {exc_type.__name__}")
            elif not self._committed:
                await self.commit()
        finally:
            if self._owns_session and self._session is not None:
                await self._session.close()
                self._session = None
                self._teams = None
                self._users = None
                self._pull_requests = None


class UnitOfWorkFactory:
    """
    Factory for creating unit of work instances.

    Injected into the review service so every operation gets a fresh
    transaction.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_factory = session_factory

    def __call__(self) -> UnitOfWork:
        """Create a new unit of work."""
        return UnitOfWork(session_factory=self._session_factory)

