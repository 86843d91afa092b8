"""
Reviewer Assignment Policy.

Pure decision logic for choosing reviewers. No I/O; the only source of
nondeterminism is the injected random generator, so tests can pass a
seeded ``random.Random`` and get reproducible picks.

Rules:
- Initial reviewers: active team members other than the author,
  shuffled, capped at MAX_REVIEWERS.
- Replacement: one active member of the departing reviewer's team who is
  neither the author, the departing reviewer, nor already a reviewer.
"""

import logging
import random
from typing import Iterable, List, Optional, Union

from .aggregates import PullRequest, User
from .errors import ErrorKind, ReviewError
from .value_objects import TeamMember

logger = logging.getLogger(__name__)

MAX_REVIEWERS = 2


def _unique_ids(ids: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for user_id in ids:
        if user_id not in seen:
            seen.add(user_id)
            result.append(user_id)
    return result


class ReviewerAssignmentPolicy:
    """
    Selects reviewers from a candidate pool.

    Args:
        rng: Random generator exposing ``shuffle`` and ``choice``. Defaults
            to a fresh OS-seeded ``random.Random``.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.Random()

    def select_initial_reviewers(
        self,
        author_id: str,
        team_members: Iterable[Union[User, TeamMember]],
    ) -> List[str]:
        """
        Pick up to MAX_REVIEWERS reviewers for a new pull request.

        Args:
            author_id: Pull request author, never selected.
            team_members: Members of the author's team; inactive members
                are skipped.

        Returns:
            Distinct reviewer ids, possibly empty.
        """
        candidates = _unique_ids(
            member.user_id
            for member in team_members
            if member.user_id != author_id and member.is_active
        )
        if not candidates:
            return []

        self._rng.shuffle(candidates)
        return candidates[:min(MAX_REVIEWERS, len(candidates))]

    def select_replacement_reviewer(
        self,
        pull_request: PullRequest,
        old_reviewer_id: str,
        candidate_pool: Iterable[Union[User, TeamMember]],
    ) -> str:
        """
        Pick the user who replaces ``old_reviewer_id`` on ``pull_request``.

        The pool is the active membership of the departing reviewer's team,
        not the author's.

        Raises:
            ReviewError: NO_CANDIDATE when nobody is eligible.
        """
        excluded = {pull_request.author_id, old_reviewer_id}
        excluded.update(pull_request.assigned_reviewers)

        eligible = _unique_ids(
            candidate.user_id
            for candidate in candidate_pool
            if candidate.is_active and candidate.user_id not in excluded
        )
        if not eligible:
            logger.info(
                f"No replacement for {old_reviewer_id} on {pull_request.pull_request_id}"
            )
            raise ReviewError(ErrorKind.NO_CANDIDATE)

        return self._rng.choice(eligible)
