"""
Error taxonomy for review workflow operations.

Every failure carries an ErrorKind. Callers branch on ``exc.kind``; the
message is for humans only. The web layer maps kinds to HTTP status codes.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Failure kinds surfaced by the review workflow."""

    # Uniqueness violations
    TEAM_EXISTS = "TEAM_EXISTS"
    PR_EXISTS = "PR_EXISTS"

    # Missing referenced entity
    NOT_FOUND = "NOT_FOUND"
    AUTHOR_NOT_FOUND = "AUTHOR_NOT_FOUND"
    TEAM_NOT_FOUND = "TEAM_NOT_FOUND"

    # Invalid state transition / precondition
    PR_MERGED = "PR_MERGED"
    NOT_ASSIGNED = "NOT_ASSIGNED"

    # Policy could not find an eligible replacement
    NO_CANDIDATE = "NO_CANDIDATE"

    # Malformed input
    INVALID_REQUEST = "INVALID_REQUEST"

    # Store / infrastructure failure
    INTERNAL = "INTERNAL"


DEFAULT_MESSAGES = {
    ErrorKind.TEAM_EXISTS: "team_name already exists",
    ErrorKind.PR_EXISTS: "PR id already exists",
    ErrorKind.NOT_FOUND: "resource not found",
    ErrorKind.AUTHOR_NOT_FOUND: "author not found",
    ErrorKind.TEAM_NOT_FOUND: "team not found",
    ErrorKind.PR_MERGED: "cannot reassign on merged PR",
    ErrorKind.NOT_ASSIGNED: "reviewer is not assigned to this PR",
    ErrorKind.NO_CANDIDATE: "no active replacement candidate in team",
    ErrorKind.INVALID_REQUEST: "invalid request",
    ErrorKind.INTERNAL: "internal server error",
}


class ReviewError(Exception):
    """
    Raised by the assignment policy and the review service.

    Usage:
        raise ReviewError(ErrorKind.PR_MERGED)
        raise ReviewError(ErrorKind.NOT_FOUND, f"PR {pr_id} not found")
    """

    def __init__(self, kind: ErrorKind, message: Optional[str] = None):
        self.kind = kind
        self.message = message or DEFAULT_MESSAGES[kind]
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"ReviewError({self.kind.value}, {self.message!r})"
