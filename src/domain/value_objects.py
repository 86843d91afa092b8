"""
Value Objects for the PR reviewer domain.

Value objects are immutable and compared by value. They describe team
membership entries, pull request summaries and reassignment outcomes.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PullRequestStatus(str, Enum):
    """Pull request lifecycle state. MERGED is terminal."""
    OPEN = "OPEN"
    MERGED = "MERGED"


class TeamMember(BaseModel):
    """A user entry as submitted with (or listed under) a team."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(min_length=1)
    username: str
    is_active: bool = True


class PullRequestShort(BaseModel):
    """Abbreviated pull request used in review listings."""

    model_config = ConfigDict(frozen=True)

    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: PullRequestStatus
