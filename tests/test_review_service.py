"""Tests for the review workflow service against a temporary SQLite database."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from domain import (
    ErrorKind,
    PullRequest,
    PullRequestStatus,
    ReviewError,
    Team,
    TeamMember,
    User,
    utc_now,
)
from services.review_service import ReviewService


def _team(name, *members):
    """Build a team from (user_id, is_active) pairs."""
    return Team(
        team_name=name,
        members=[
            TeamMember(user_id=user_id, username=f"user-{user_id}", is_active=is_active)
            for user_id, is_active in members
        ],
    )


async def _expect_error(coro, kind):
    with pytest.raises(ReviewError) as exc_info:
        await coro
    assert exc_info.value.kind == kind
    return exc_info.value


# =============================================================================
# TEAMS
# =============================================================================

class TestTeams:
    """Team creation and lookup."""

    @pytest.mark.asyncio
    async def test_create_and_get_team(self, review_service):
        created = await review_service.create_team(_team("core", ("a", True), ("b", False)))
        assert created.team_name == "core"

        team = await review_service.get_team("core")
        assert [m.user_id for m in team.members] == ["a", "b"]
        assert team.members[1].is_active is False

    @pytest.mark.asyncio
    async def test_duplicate_team(self, review_service):
        await review_service.create_team(_team("core", ("a", True)))
        await _expect_error(
            review_service.create_team(_team("core", ("z", True))),
            ErrorKind.TEAM_EXISTS,
        )
        # The failed call did not add z anywhere
        await _expect_error(review_service.get_user_reviews("z"), ErrorKind.NOT_FOUND)

    @pytest.mark.asyncio
    async def test_blank_team_name(self, review_service):
        await _expect_error(
            review_service.create_team(Team(team_name="   ", members=[])),
            ErrorKind.INVALID_REQUEST,
        )

    @pytest.mark.asyncio
    async def test_unknown_team(self, review_service):
        await _expect_error(review_service.get_team("ghost"), ErrorKind.NOT_FOUND)

    @pytest.mark.asyncio
    async def test_memberless_team_is_not_found(self, review_service):
        """A registered team without members reads as NOT_FOUND."""
        await review_service.create_team(Team(team_name="empty", members=[]))
        await _expect_error(review_service.get_team("empty"), ErrorKind.NOT_FOUND)
        await _expect_error(
            review_service.create_team(Team(team_name="empty", members=[])),
            ErrorKind.TEAM_EXISTS,
        )

    @pytest.mark.asyncio
    async def test_member_moves_between_teams(self, review_service):
        """Listing an existing user under a new team moves and updates them."""
        await review_service.create_team(_team("core", ("a", True), ("b", True)))
        await review_service.create_team(
            Team(
                team_name="infra",
                members=[TeamMember(user_id="b", username="renamed", is_active=False)],
            )
        )

        core = await review_service.get_team("core")
        infra = await review_service.get_team("infra")
        assert [m.user_id for m in core.members] == ["a"]
        assert infra.members == [TeamMember(user_id="b", username="renamed", is_active=False)]


# =============================================================================
# USERS
# =============================================================================

class TestUsers:
    """Activation and review listing."""

    @pytest.mark.asyncio
    async def test_set_user_active(self, review_service):
        await review_service.create_team(_team("core", ("a", True)))

        user = await review_service.set_user_active("a", False)
        assert user.is_active is False
        assert user.team_name == "core"

        # Idempotent
        again = await review_service.set_user_active("a", False)
        assert again == user

    @pytest.mark.asyncio
    async def test_set_unknown_user(self, review_service):
        await _expect_error(review_service.set_user_active("nobody", True), ErrorKind.NOT_FOUND)

    @pytest.mark.asyncio
    async def test_reviews_for_unknown_user(self, review_service):
        await _expect_error(review_service.get_user_reviews("nobody"), ErrorKind.NOT_FOUND)

    @pytest.mark.asyncio
    async def test_reviews_include_merged_and_are_ordered(self, review_service):
        await review_service.create_team(_team("core", ("a", True), ("b", True)))
        await review_service.create_pull_request("pr-2", "Second", "a")
        await review_service.create_pull_request("pr-1", "First", "a")
        await review_service.merge_pull_request("pr-2")

        reviews = await review_service.get_user_reviews("b")
        assert [pr.pull_request_id for pr in reviews] == ["pr-1", "pr-2"]
        assert reviews[1].status == PullRequestStatus.MERGED

        assert await review_service.get_user_reviews("a") == []


# =============================================================================
# PULL REQUESTS
# =============================================================================

class TestCreatePullRequest:
    """Pull request creation with automatic reviewers."""

    @pytest.mark.asyncio
    async def test_inactive_member_not_assigned(self, review_service):
        """Team core {A active, B active, C inactive}: PR by A gets exactly [B]."""
        await review_service.create_team(_team("core", ("A", True), ("B", True), ("C", False)))

        pr = await review_service.create_pull_request("pr-1", "Add search", "A")

        assert pr.assigned_reviewers == ["B"]
        assert pr.status == PullRequestStatus.OPEN
        assert pr.created_at is not None
        assert pr.merged_at is None

    @pytest.mark.asyncio
    async def test_at_most_two_reviewers(self, review_service):
        await review_service.create_team(
            _team("core", ("a", True), ("b", True), ("c", True), ("d", True))
        )
        pr = await review_service.create_pull_request("pr-1", "Refactor", "a")

        assert len(pr.assigned_reviewers) == 2
        assert "a" not in pr.assigned_reviewers
        assert set(pr.assigned_reviewers) <= {"b", "c", "d"}

    @pytest.mark.asyncio
    async def test_solo_author_gets_no_reviewers(self, review_service):
        await review_service.create_team(_team("solo", ("a", True)))
        pr = await review_service.create_pull_request("pr-1", "Tweak", "a")
        assert pr.assigned_reviewers == []

    @pytest.mark.asyncio
    async def test_duplicate_pull_request(self, review_service):
        await review_service.create_team(_team("core", ("a", True), ("b", True)))
        await review_service.create_pull_request("pr-1", "First", "a")
        await _expect_error(
            review_service.create_pull_request("pr-1", "Again", "a"),
            ErrorKind.PR_EXISTS,
        )

    @pytest.mark.asyncio
    async def test_pr_exists_checked_before_author(self, review_service):
        await review_service.create_team(_team("core", ("a", True), ("b", True)))
        await review_service.create_pull_request("pr-1", "First", "a")
        await _expect_error(
            review_service.create_pull_request("pr-1", "Again", "ghost"),
            ErrorKind.PR_EXISTS,
        )

    @pytest.mark.asyncio
    async def test_unknown_author(self, review_service):
        await _expect_error(
            review_service.create_pull_request("pr-1", "Orphan", "ghost"),
            ErrorKind.AUTHOR_NOT_FOUND,
        )


class TestMergePullRequest:
    """Idempotent merge."""

    @pytest.mark.asyncio
    async def test_merge_is_idempotent(self, review_service):
        await review_service.create_team(_team("core", ("a", True), ("b", True)))
        await review_service.create_pull_request("pr-1", "Feature", "a")

        first = await review_service.merge_pull_request("pr-1")
        second = await review_service.merge_pull_request("pr-1")

        assert first.status == PullRequestStatus.MERGED
        assert first.merged_at is not None
        assert second == first

    @pytest.mark.asyncio
    async def test_merge_unknown(self, review_service):
        await _expect_error(review_service.merge_pull_request("nope"), ErrorKind.NOT_FOUND)


class TestReassignReviewer:
    """Reviewer replacement."""

    async def _pr_reviewed_by_b_and_c(self, service):
        """Team core {a(author), b, c, d}; PR pr-1 reviewed by exactly b and c."""
        await service.create_team(
            _team("core", ("a", True), ("b", True), ("c", True), ("d", False))
        )
        pr = await service.create_pull_request("pr-1", "Feature", "a")
        assert sorted(pr.assigned_reviewers) == ["b", "c"]
        await service.set_user_active("d", True)

    @pytest.mark.asyncio
    async def test_reassign_then_no_candidate(self, review_service):
        """Reviewers {b, c}, pool {a, b, c, d}: b -> d, then d has nobody left."""
        await self._pr_reviewed_by_b_and_c(review_service)

        result = await review_service.reassign_reviewer("pr-1", "b")
        assert result.replaced_by == "d"
        assert sorted(result.pull_request.assigned_reviewers) == ["c", "d"]

        # b would be eligible again; take it out of the pool
        await review_service.set_user_active("b", False)
        await _expect_error(
            review_service.reassign_reviewer("pr-1", "d"),
            ErrorKind.NO_CANDIDATE,
        )

    @pytest.mark.asyncio
    async def test_former_reviewer_is_eligible_again(self, review_service):
        await self._pr_reviewed_by_b_and_c(review_service)
        await review_service.reassign_reviewer("pr-1", "b")

        result = await review_service.reassign_reviewer("pr-1", "d")
        assert result.replaced_by == "b"

    @pytest.mark.asyncio
    async def test_pool_is_reviewers_team(self, review_service):
        """The replacement comes from the departing reviewer's team, not the author's."""
        await self._pr_reviewed_by_b_and_c(review_service)
        # b moves to infra, where e is the only other member
        await review_service.create_team(_team("infra", ("b", True), ("e", True)))

        result = await review_service.reassign_reviewer("pr-1", "b")
        assert result.replaced_by == "e"
        assert sorted(result.pull_request.assigned_reviewers) == ["c", "e"]

        reviews = await review_service.get_user_reviews("e")
        assert [pr.pull_request_id for pr in reviews] == ["pr-1"]
        assert await review_service.get_user_reviews("b") == []

    @pytest.mark.asyncio
    async def test_no_candidate_leaves_reviewers_unchanged(self, review_service):
        await review_service.create_team(_team("core", ("a", True), ("b", True), ("c", True)))
        await review_service.create_pull_request("pr-1", "Feature", "a")

        await _expect_error(
            review_service.reassign_reviewer("pr-1", "b"),
            ErrorKind.NO_CANDIDATE,
        )
        reviews = await review_service.get_user_reviews("b")
        assert [pr.pull_request_id for pr in reviews] == ["pr-1"]

    @pytest.mark.asyncio
    async def test_merged_pr_rejects_reassign(self, review_service):
        """Create, merge, reassign -> PR_MERGED; merging again returns the same PR."""
        await self._pr_reviewed_by_b_and_c(review_service)
        merged = await review_service.merge_pull_request("pr-1")

        await _expect_error(
            review_service.reassign_reviewer("pr-1", "b"),
            ErrorKind.PR_MERGED,
        )
        # PR_MERGED wins even when the reviewer is not assigned
        await _expect_error(
            review_service.reassign_reviewer("pr-1", "nobody"),
            ErrorKind.PR_MERGED,
        )
        assert await review_service.merge_pull_request("pr-1") == merged

    @pytest.mark.asyncio
    async def test_not_assigned(self, review_service):
        await self._pr_reviewed_by_b_and_c(review_service)
        await _expect_error(
            review_service.reassign_reviewer("pr-1", "d"),
            ErrorKind.NOT_ASSIGNED,
        )

    @pytest.mark.asyncio
    async def test_unknown_pull_request(self, review_service):
        await _expect_error(
            review_service.reassign_reviewer("ghost", "b"),
            ErrorKind.NOT_FOUND,
        )


# =============================================================================
# STORE FAILURES
# =============================================================================

class TestStoreFailures:
    """SQLAlchemy errors surface as INTERNAL."""

    @pytest.mark.asyncio
    async def test_sqlalchemy_error_becomes_internal(self):
        uow = MagicMock()
        uow.__aenter__ = AsyncMock(return_value=uow)
        uow.__aexit__ = AsyncMock(return_value=False)
        uow.pull_requests.get = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("database is locked"))
        )
        service = ReviewService(lambda: uow)

        error = await _expect_error(service.merge_pull_request("pr-1"), ErrorKind.INTERNAL)
        assert isinstance(error.__cause__, OperationalError)
        uow.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_domain_error_passes_through(self):
        uow = MagicMock()
        uow.__aenter__ = AsyncMock(return_value=uow)
        uow.__aexit__ = AsyncMock(return_value=False)
        uow.pull_requests.get = AsyncMock(return_value=None)
        service = ReviewService(lambda: uow)

        await _expect_error(service.merge_pull_request("pr-1"), ErrorKind.NOT_FOUND)


# =============================================================================
# REASSIGNMENT PRECONDITIONS (mocked unit of work)
# =============================================================================

def _mock_uow(reviewers=("b", "c")):
    """Unit of work whose store holds open pr-1 by a, reviewed by ``reviewers``."""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)
    uow.commit = AsyncMock()
    uow.pull_requests.get = AsyncMock(return_value=PullRequest(
        pull_request_id="pr-1",
        pull_request_name="Add search",
        author_id="a",
        assigned_reviewers=list(reviewers),
        created_at=utc_now(),
    ))
    uow.users.get = AsyncMock(
        return_value=User(user_id="b", username="user-b", team_name="core")
    )
    uow.teams.exists = AsyncMock(return_value=True)
    uow.users.list_active_by_team = AsyncMock(return_value=[
        User(user_id=user_id, username=f"user-{user_id}", team_name="core")
        for user_id in ("a", "b", "c", "d")
    ])
    uow.pull_requests.replace_reviewer = AsyncMock(return_value=True)
    return uow


class TestReassignPreconditions:
    """Order of checks and the swap guard in reassign_reviewer."""

    @pytest.mark.asyncio
    async def test_old_reviewer_missing_from_store(self):
        uow = _mock_uow()
        uow.users.get.return_value = None
        service = ReviewService(lambda: uow)

        await _expect_error(service.reassign_reviewer("pr-1", "b"), ErrorKind.NOT_FOUND)
        uow.teams.exists.assert_not_awaited()
        uow.pull_requests.replace_reviewer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_old_reviewer_team_missing(self):
        uow = _mock_uow()
        uow.teams.exists.return_value = False
        service = ReviewService(lambda: uow)

        await _expect_error(service.reassign_reviewer("pr-1", "b"), ErrorKind.TEAM_NOT_FOUND)
        uow.teams.exists.assert_awaited_once_with("core")
        uow.users.list_active_by_team.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_assignment_checked_before_user_lookup(self):
        uow = _mock_uow()
        service = ReviewService(lambda: uow)

        await _expect_error(service.reassign_reviewer("pr-1", "z"), ErrorKind.NOT_ASSIGNED)
        uow.users.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reviewer_row_gone_at_swap_time(self):
        """A reviewer removed after the read is NOT_ASSIGNED and nothing commits."""
        uow = _mock_uow()
        uow.pull_requests.replace_reviewer.return_value = False
        service = ReviewService(lambda: uow)

        await _expect_error(service.reassign_reviewer("pr-1", "b"), ErrorKind.NOT_ASSIGNED)
        uow.pull_requests.replace_reviewer.assert_awaited_once_with("pr-1", "b", "d")
        uow.commit.assert_not_awaited()
        assert ReviewError in uow.__aexit__.await_args.args
