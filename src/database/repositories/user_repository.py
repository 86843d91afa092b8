"""Async User Repository Implementation.

Implements IUserRepository using SQLAlchemy async sessions.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import Boolean, bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from domain.aggregates import User
from domain.repositories import IUserRepository

logger = logging.getLogger(__name__)


_USER_COLUMNS = "user_id, username, team_name, is_active"


class UserRepository(IUserRepository):
    """Async implementation of IUserRepository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, user_id: str) -> Optional[User]:
        """
        Get a user by ID.

        Args:
            user_id: User identifier.

        Returns:
            User or None if not found.
        """
        query = text(
            f"SELECT {_USER_COLUMNS} FROM users WHERE user_id = :user_id"
        ).columns(is_active=Boolean())
        result = await self._session.execute(query, {"user_id": user_id})
        row = result.fetchone()

        if row is None:
            return None

        return self._row_to_user(row)

    async def set_active(self, user_id: str, is_active: bool) -> Optional[User]:
        """
        Set the active flag.

        Args:
            user_id: User identifier.
            is_active: New flag value.

        Returns:
            Updated user, or None if the user does not exist.
        """
        query = text(
            "UPDATE users SET is_active = :is_active WHERE user_id = :user_id"
        ).bindparams(bindparam("is_active", type_=Boolean()))
        result = await self._session.execute(
            query,
            {"user_id": user_id, "is_active": is_active},
        )

        if result.rowcount == 0:
            return None

        logger.debug(f"Set user {user_id} is_active={is_active}")
        return await self.get(user_id)

    async def list_by_team(self, team_name: str) -> List[User]:
        """All members of a team, active or not."""
        query = text(f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE team_name = :team_name
            ORDER BY user_id
        """).columns(is_active=Boolean())
        result = await self._session.execute(query, {"team_name": team_name})
        return [self._row_to_user(row) for row in result.fetchall()]

    async def list_active_by_team(self, team_name: str) -> List[User]:
        """Active members of a team."""
        query = text(f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE team_name = :team_name AND is_active = :is_active
            ORDER BY user_id
        """).bindparams(bindparam("is_active", type_=Boolean())).columns(is_active=Boolean())
        result = await self._session.execute(
            query,
            {"team_name": team_name, "is_active": True},
        )
        return [self._row_to_user(row) for row in result.fetchall()]

    def _row_to_user(self, row) -> User:
        """Convert a database row to a User."""
        return User(
            user_id=row.user_id,
            username=row.username,
            team_name=row.team_name,
            is_active=bool(row.is_active),
        )
