"""
Review Workflow Service

Orchestrates teams, users and pull requests:
- Team registration with member upserts
- User activation toggling
- Pull request creation with automatic reviewer assignment
- Idempotent merge
- Reviewer reassignment from the departing reviewer's team

Every operation runs in its own unit of work. Domain failures surface as
ReviewError; store failures are logged and surface as ErrorKind.INTERNAL.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from domain import (
    ErrorKind,
    IUnitOfWork,
    PullRequest,
    PullRequestShort,
    PullRequestStatus,
    ReassignResult,
    ReviewError,
    ReviewerAssignmentPolicy,
    Team,
    User,
    utc_now,
)
from database.unit_of_work import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Review workflow operations.

    Args:
        uow_factory: Callable returning a fresh unit of work per operation.
        policy: Reviewer selection policy. Defaults to an unseeded one.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        policy: Optional[ReviewerAssignmentPolicy] = None,
    ):
        self._uow_factory = uow_factory
        self._policy = policy or ReviewerAssignmentPolicy()

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[IUnitOfWork]:
        """Open a unit of work and translate store failures."""
        try:
            async with self._uow_factory() as uow:
                yield uow
        except SQLAlchemyError as e:
            logger.exception(f"Store failure during {operation}: {e}")
            raise ReviewError(ErrorKind.INTERNAL) from e

    # =========================================================================
    # TEAMS
    # =========================================================================

    async def create_team(self, team: Team) -> Team:
        """Register a team and upsert its members."""
        if not team.team_name.strip():
            raise ReviewError(ErrorKind.INVALID_REQUEST, "team_name must not be blank")

        async with self._transaction("create_team") as uow:
            if await uow.teams.exists(team.team_name):
                raise ReviewError(ErrorKind.TEAM_EXISTS)

            await uow.teams.create_with_members(team)
            stored = await uow.teams.get_by_name(team.team_name)
            await uow.commit()

        logger.info(
            f"Team created: {team.team_name}",
            extra={"team_name": team.team_name, "member_count": len(team.members)},
        )
        return stored if stored is not None else team

    async def get_team(self, team_name: str) -> Team:
        """Get a team with its members."""
        async with self._transaction("get_team") as uow:
            team = await uow.teams.get_by_name(team_name)

        if team is None:
            raise ReviewError(ErrorKind.NOT_FOUND, f"team {team_name} not found")
        return team

    # =========================================================================
    # USERS
    # =========================================================================

    async def set_user_active(self, user_id: str, is_active: bool) -> User:
        """Set a user's active flag. Repeating the same value is harmless."""
        async with self._transaction("set_user_active") as uow:
            user = await uow.users.set_active(user_id, is_active)
            if user is None:
                raise ReviewError(ErrorKind.NOT_FOUND, f"user {user_id} not found")
            await uow.commit()

        logger.info(f"User {user_id} is_active={is_active}")
        return user

    async def get_user_reviews(self, user_id: str) -> List[PullRequestShort]:
        """Pull requests the user reviews, any status, ordered by id."""
        async with self._transaction("get_user_reviews") as uow:
            if await uow.users.get(user_id) is None:
                raise ReviewError(ErrorKind.NOT_FOUND, f"user {user_id} not found")
            return await uow.pull_requests.list_by_reviewer(user_id)

    # =========================================================================
    # PULL REQUESTS
    # =========================================================================

    async def create_pull_request(
        self,
        pull_request_id: str,
        title: str,
        author_id: str,
    ) -> PullRequest:
        """Create an OPEN pull request and assign up to two reviewers."""
        async with self._transaction("create_pull_request") as uow:
            if await uow.pull_requests.exists(pull_request_id):
                raise ReviewError(ErrorKind.PR_EXISTS)

            author = await uow.users.get(author_id)
            if author is None:
                raise ReviewError(ErrorKind.AUTHOR_NOT_FOUND)

            if not await uow.teams.exists(author.team_name):
                raise ReviewError(ErrorKind.TEAM_NOT_FOUND)

            members = await uow.users.list_by_team(author.team_name)
            reviewers = self._policy.select_initial_reviewers(author_id, members)

            await uow.pull_requests.create(PullRequest(
                pull_request_id=pull_request_id,
                pull_request_name=title,
                author_id=author_id,
                status=PullRequestStatus.OPEN,
                assigned_reviewers=reviewers,
                created_at=utc_now(),
            ))
            created = await uow.pull_requests.get(pull_request_id)
            await uow.commit()

        logger.info(
            f"Pull request created: {pull_request_id}",
            extra={"author_id": author_id, "reviewers": reviewers},
        )
        return created

    async def merge_pull_request(self, pull_request_id: str) -> PullRequest:
        """Mark a pull request MERGED. Merging twice returns it unchanged."""
        async with self._transaction("merge_pull_request") as uow:
            pull_request = await uow.pull_requests.get(pull_request_id)
            if pull_request is None:
                raise ReviewError(ErrorKind.NOT_FOUND, f"PR {pull_request_id} not found")

            if pull_request.is_merged:
                return pull_request

            merged = await uow.pull_requests.update_status(
                pull_request_id, PullRequestStatus.MERGED, merged_at=utc_now()
            )
            if merged is None:
                raise ReviewError(ErrorKind.NOT_FOUND, f"PR {pull_request_id} not found")
            await uow.commit()

        logger.info(f"Pull request merged: {pull_request_id}")
        return merged

    async def reassign_reviewer(
        self,
        pull_request_id: str,
        old_reviewer_id: str,
    ) -> ReassignResult:
        """Replace one reviewer with an active member of that reviewer's team."""
        async with self._transaction("reassign_reviewer") as uow:
            pull_request = await uow.pull_requests.get(pull_request_id)
            if pull_request is None:
                raise ReviewError(ErrorKind.NOT_FOUND, f"PR {pull_request_id} not found")

            if pull_request.is_merged:
                raise ReviewError(ErrorKind.PR_MERGED)

            if not pull_request.has_reviewer(old_reviewer_id):
                raise ReviewError(ErrorKind.NOT_ASSIGNED)

            old_reviewer = await uow.users.get(old_reviewer_id)
            if old_reviewer is None:
                raise ReviewError(ErrorKind.NOT_FOUND, f"user {old_reviewer_id} not found")

            if not await uow.teams.exists(old_reviewer.team_name):
                raise ReviewError(ErrorKind.TEAM_NOT_FOUND)

            pool = await uow.users.list_active_by_team(old_reviewer.team_name)
            new_reviewer_id = self._policy.select_replacement_reviewer(
                pull_request, old_reviewer_id, pool
            )

            replaced = await uow.pull_requests.replace_reviewer(
                pull_request_id, old_reviewer_id, new_reviewer_id
            )
            if not replaced:
                # Removed by a concurrent reassignment since the read above
                raise ReviewError(ErrorKind.NOT_ASSIGNED)
            updated = await uow.pull_requests.get(pull_request_id)
            await uow.commit()

        logger.info(
            f"Reviewer reassigned on {pull_request_id}: {old_reviewer_id} -> {new_reviewer_id}"
        )
        return ReassignResult(pull_request=updated, replaced_by=new_reviewer_id)


# Singleton instance
_review_service: Optional[ReviewService] = None


def get_review_service() -> ReviewService:
    """Get the singleton review service instance."""
    global _review_service
    if _review_service is None:
        _review_service = ReviewService(UnitOfWorkFactory())
    return _review_service


def reset_review_service() -> None:
    """Drop the singleton so the next call rebuilds it (tests, shutdown)."""
    global _review_service
    _review_service = None
