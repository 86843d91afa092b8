"""
SQLAlchemy ORM Models for the PR reviewer database.

Architecture:
- Primary Keys: natural string ids supplied by clients
  (team_name, user_id, pull_request_id)
- pr_reviewers: association table with a composite primary key, so a
  user can be assigned to a pull request at most once
- Status: OPEN/MERGED enforced by a check constraint

SQLite databases are created from this metadata at startup; PostgreSQL
schemas come from the Alembic revisions under database/alembic.
"""

from sqlalchemy import (
    Column, String, Boolean, DateTime, ForeignKey, Index, CheckConstraint,
    PrimaryKeyConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from domain.aggregates import utc_now
from domain.value_objects import PullRequestStatus


Base = declarative_base()


class TeamRecord(Base):
    """Registered team. Membership lives on users.team_name."""
    __tablename__ = "teams"

    team_name = Column(String(255), primary_key=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    members = relationship("UserRecord", back_populates="team")

    __table_args__ = (
        CheckConstraint("team_name <> ''", name="ck_team_name_not_empty"),
    )

    def __repr__(self):
        return f"<TeamRecord {self.team_name}>"


class UserRecord(Base):
    """A user; belongs to exactly one team."""
    __tablename__ = "users"

    user_id = Column(String(255), primary_key=True)
    username = Column(String(255), nullable=False)
    team_name = Column(
        String(255),
        ForeignKey("teams.team_name"),
        nullable=False,
        index=True,
    )
    is_active = Column(Boolean, nullable=False, default=True)

    team = relationship("TeamRecord", back_populates="members")

    __table_args__ = (
        Index("ix_users_team_active", "team_name", "is_active"),
    )

    def __repr__(self):
        return f"<UserRecord {self.user_id} team={self.team_name} active={self.is_active}>"


class PullRequestRecord(Base):
    """Pull request header row."""
    __tablename__ = "pull_requests"

    pull_request_id = Column(String(255), primary_key=True)
    pull_request_name = Column(String(500), nullable=False)
    author_id = Column(String(255), ForeignKey("users.user_id"), nullable=False, index=True)
    status = Column(
        String(16),
        nullable=False,
        default=PullRequestStatus.OPEN.value,
        index=True,
    )
    created_at = Column(DateTime, default=utc_now, nullable=False)
    merged_at = Column(DateTime, nullable=True)

    reviewers = relationship(
        "PullRequestReviewerRecord",
        back_populates="pull_request",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("status IN ('OPEN', 'MERGED')", name="ck_pull_request_status"),
    )

    def __repr__(self):
        return f"<PullRequestRecord {self.pull_request_id} {self.status}>"


class PullRequestReviewerRecord(Base):
    """Reviewer assignment (pull request <-> user)."""
    __tablename__ = "pr_reviewers"

    pull_request_id = Column(
        String(255),
        ForeignKey("pull_requests.pull_request_id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = Column(String(255), ForeignKey("users.user_id"), nullable=False, index=True)

    pull_request = relationship("PullRequestRecord", back_populates="reviewers")

    __table_args__ = (
        PrimaryKeyConstraint("pull_request_id", "user_id"),
    )
