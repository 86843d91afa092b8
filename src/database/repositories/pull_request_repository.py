"""Async Pull Request Repository Implementation.

Implements IPullRequestRepository using SQLAlchemy async sessions.
Reviewer assignments live in pr_reviewers; every write here runs inside
the owning UnitOfWork's transaction, so the header row and reviewer rows
become visible together.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from domain.aggregates import PullRequest
from domain.repositories import IPullRequestRepository
from domain.value_objects import PullRequestShort, PullRequestStatus

logger = logging.getLogger(__name__)


class PullRequestRepository(IPullRequestRepository):
    """Async implementation of IPullRequestRepository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def exists(self, pull_request_id: str) -> bool:
        """Check if a pull request exists."""
        query = text(
            "SELECT 1 FROM pull_requests WHERE pull_request_id = :pull_request_id LIMIT 1"
        )
        result = await self._session.execute(query, {"pull_request_id": pull_request_id})
        return result.fetchone() is not None

    async def create(self, pull_request: PullRequest) -> None:
        """
        Insert a pull request and its reviewer rows.

        Args:
            pull_request: Pull request to persist. created_at must be set.
        """
        query = text("""
            INSERT INTO pull_requests (
                pull_request_id, pull_request_name, author_id,
                status, created_at, merged_at
            ) VALUES (
                :pull_request_id, :pull_request_name, :author_id,
                :status, :created_at, :merged_at
            )
        """).bindparams(
            bindparam("created_at", type_=DateTime()),
            bindparam("merged_at", type_=DateTime()),
        )
        await self._session.execute(query, {
            "pull_request_id": pull_request.pull_request_id,
            "pull_request_name": pull_request.pull_request_name,
            "author_id": pull_request.author_id,
            "status": pull_request.status.value,
            "created_at": pull_request.created_at,
            "merged_at": pull_request.merged_at,
        })

        if pull_request.assigned_reviewers:
            await self.assign_reviewers(
                pull_request.pull_request_id,
                pull_request.assigned_reviewers,
            )

        logger.debug(f"Saved pull request: {pull_request.pull_request_id}")

    async def get(self, pull_request_id: str) -> Optional[PullRequest]:
        """
        Get a pull request with its assigned reviewers.

        Args:
            pull_request_id: Pull request identifier.

        Returns:
            PullRequest or None if not found.
        """
        query = text("""
            SELECT pull_request_id, pull_request_name, author_id,
                   status, created_at, merged_at
            FROM pull_requests
            WHERE pull_request_id = :pull_request_id
        """).columns(created_at=DateTime(), merged_at=DateTime())
        result = await self._session.execute(query, {"pull_request_id": pull_request_id})
        row = result.fetchone()

        if row is None:
            return None

        reviewers = await self._session.execute(
            text("""
                SELECT user_id FROM pr_reviewers
                WHERE pull_request_id = :pull_request_id
                ORDER BY user_id
            """),
            {"pull_request_id": pull_request_id},
        )

        return PullRequest(
            pull_request_id=row.pull_request_id,
            pull_request_name=row.pull_request_name,
            author_id=row.author_id,
            status=PullRequestStatus(row.status),
            assigned_reviewers=[r.user_id for r in reviewers.fetchall()],
            created_at=row.created_at,
            merged_at=row.merged_at,
        )

    async def update_status(
        self,
        pull_request_id: str,
        status: PullRequestStatus,
        merged_at: Optional[datetime] = None,
    ) -> Optional[PullRequest]:
        """
        Update status, and merged_at when provided.

        Returns:
            The updated pull request, or None if it does not exist.
        """
        params = {"pull_request_id": pull_request_id, "status": status.value}

        if merged_at is not None:
            query = text("""
                UPDATE pull_requests SET status = :status, merged_at = :merged_at
                WHERE pull_request_id = :pull_request_id
            """).bindparams(bindparam("merged_at", type_=DateTime()))
            params["merged_at"] = merged_at
        else:
            query = text("""
                UPDATE pull_requests SET status = :status
                WHERE pull_request_id = :pull_request_id
            """)

        result = await self._session.execute(query, params)
        if result.rowcount == 0:
            return None

        logger.debug(f"Pull request {pull_request_id} status -> {status.value}")
        return await self.get(pull_request_id)

    async def list_by_reviewer(self, user_id: str) -> List[PullRequestShort]:
        """
        Pull requests where the user is an assigned reviewer.

        Args:
            user_id: Reviewer identifier.

        Returns:
            Short pull request records ordered by id, any status.
        """
        query = text("""
            SELECT pr.pull_request_id, pr.pull_request_name, pr.author_id, pr.status
            FROM pull_requests pr
            JOIN pr_reviewers r ON r.pull_request_id = pr.pull_request_id
            WHERE r.user_id = :user_id
            ORDER BY pr.pull_request_id
        """)
        result = await self._session.execute(query, {"user_id": user_id})
        return [
            PullRequestShort(
                pull_request_id=row.pull_request_id,
                pull_request_name=row.pull_request_name,
                author_id=row.author_id,
                status=PullRequestStatus(row.status),
            )
            for row in result.fetchall()
        ]

    async def assign_reviewers(self, pull_request_id: str, reviewer_ids: List[str]) -> None:
        """Insert reviewer rows."""
        query = text(
            "INSERT INTO pr_reviewers (pull_request_id, user_id) VALUES (:pull_request_id, :user_id)"
        )
        for reviewer_id in reviewer_ids:
            await self._session.execute(
                query,
                {"pull_request_id": pull_request_id, "user_id": reviewer_id},
            )

    async def replace_reviewer(
        self,
        pull_request_id: str,
        old_reviewer_id: str,
        new_reviewer_id: str,
    ) -> bool:
        """
        Swap one reviewer row for another.

        Returns:
            False, with nothing inserted, when the old reviewer had no row.
        """
        result = await self._session.execute(
            text("""
                DELETE FROM pr_reviewers
                WHERE pull_request_id = :pull_request_id AND user_id = :user_id
            """),
            {"pull_request_id": pull_request_id, "user_id": old_reviewer_id},
        )
        if result.rowcount != 1:
            return False

        await self.assign_reviewers(pull_request_id, [new_reviewer_id])

        logger.debug(
            f"Replaced reviewer {old_reviewer_id} with {new_reviewer_id} on {pull_request_id}"
        )
        return True
