"""Async Team Repository Implementation.

Implements ITeamRepository using SQLAlchemy async sessions.
Team membership is stored on users.team_name; creating a team upserts
its members inside the caller's transaction.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import Boolean, DateTime, bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from domain.aggregates import Team, utc_now
from domain.repositories import ITeamRepository
from domain.value_objects import TeamMember

logger = logging.getLogger(__name__)


class TeamRepository(ITeamRepository):
    """
    Async implementation of ITeamRepository.

    Does not commit; the owning UnitOfWork decides when the transaction ends.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with a session.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    async def exists(self, team_name: str) -> bool:
        """Check if a team name is registered."""
        query = text("SELECT 1 FROM teams WHERE team_name = :team_name LIMIT 1")
        result = await self._session.execute(query, {"team_name": team_name})
        return result.fetchone() is not None

    async def create_with_members(self, team: Team) -> None:
        """
        Insert the team and upsert each member into it.

        Args:
            team: Team with the members to register.
        """
        insert_team = text(
            "INSERT INTO teams (team_name, created_at) VALUES (:team_name, :created_at)"
        ).bindparams(bindparam("created_at", type_=DateTime()))
        await self._session.execute(
            insert_team,
            {"team_name": team.team_name, "created_at": utc_now()},
        )

        for member in team.members:
            await self._upsert_member(team.team_name, member)

        logger.debug(f"Created team {team.team_name} with {len(team.members)} member(s)")

    async def _upsert_member(self, team_name: str, member: TeamMember) -> None:
        existing = await self._session.execute(
            text("SELECT team_name FROM users WHERE user_id = :user_id"),
            {"user_id": member.user_id},
        )
        row = existing.fetchone()

        if row is None:
            query = text("""
                INSERT INTO users (user_id, username, team_name, is_active)
                VALUES (:user_id, :username, :team_name, :is_active)
            """)
        else:
            if row.team_name != team_name:
                logger.info(f"Moving user {member.user_id} from team {row.team_name} to {team_name}")
            query = text("""
                UPDATE users SET
                    username = :username,
                    team_name = :team_name,
                    is_active = :is_active
                WHERE user_id = :user_id
            """)

        await self._session.execute(
            query.bindparams(bindparam("is_active", type_=Boolean())),
            {
                "user_id": member.user_id,
                "username": member.username,
                "team_name": team_name,
                "is_active": member.is_active,
            },
        )

    async def get_by_name(self, team_name: str) -> Optional[Team]:
        """
        Get a team with its members.

        Returns None when no user belongs to the team, including a team
        that is registered but has no members.
        """
        query = text("""
            SELECT user_id, username, is_active
            FROM users
            WHERE team_name = :team_name
            ORDER BY user_id
        """).columns(is_active=Boolean())
        result = await self._session.execute(query, {"team_name": team_name})
        rows = result.fetchall()

        if not rows:
            return None

        return Team(
            team_name=team_name,
            members=[
                TeamMember(user_id=row.user_id, username=row.username, is_active=row.is_active)
                for row in rows
            ],
        )
