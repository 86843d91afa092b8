"""
Domain Aggregates for the PR reviewer service.

Aggregates are clusters of domain objects treated as a single unit for
data changes:

- Team: owns its membership list (users stay independently addressable)
- User: belongs to exactly one team
- PullRequest: owns its list of reviewer ids
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from .value_objects import PullRequestStatus, TeamMember


def utc_now() -> datetime:
    """Naive UTC timestamp, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =============================================================================
# TEAM AGGREGATE
# =============================================================================

class Team(BaseModel):
    """
    Team Aggregate Root.

    Invariants:
    - team_name is unique and non-empty
    - members are upserted on creation; an existing user id is moved
      into this team
    """

    team_name: str = Field(min_length=1)
    members: List[TeamMember] = Field(default_factory=list)


class User(BaseModel):
    """A team member addressable on its own."""

    user_id: str
    username: str
    team_name: str
    is_active: bool = True


# =============================================================================
# PULL REQUEST AGGREGATE
# =============================================================================

class PullRequest(BaseModel):
    """
    Pull Request Aggregate Root.

    Invariants:
    - assigned_reviewers never contains author_id
    - status moves only OPEN -> MERGED
    - merged_at is set iff status is MERGED
    """

    model_config = ConfigDict(populate_by_name=True)

    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: PullRequestStatus = PullRequestStatus.OPEN
    assigned_reviewers: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    merged_at: Optional[datetime] = Field(default=None, alias="mergedAt")

    @field_serializer("created_at", "merged_at", when_used="json")
    def _serialize_timestamp(self, value: Optional[datetime]) -> Optional[str]:
        # Stored naive UTC; rendered RFC 3339 with a Z suffix
        if value is None:
            return None
        return value.replace(microsecond=0).isoformat() + "Z"

    @property
    def is_merged(self) -> bool:
        return self.status == PullRequestStatus.MERGED

    def has_reviewer(self, user_id: str) -> bool:
        return user_id in self.assigned_reviewers


class ReassignResult(BaseModel):
    """Outcome of a reviewer reassignment. Not persisted."""

    pull_request: PullRequest
    replaced_by: str
