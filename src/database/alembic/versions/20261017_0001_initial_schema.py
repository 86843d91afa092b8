"""Initial schema for teams, users, pull requests and reviewers

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17

Creates:
- teams: registered team names
- users: team members (one team per user)
- pull_requests: pull request headers with OPEN/MERGED status
- pr_reviewers: reviewer assignments (composite primary key)
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261017_0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # =========================================================================
    # TEAMS TABLE
    # =========================================================================
    op.create_table(
        'teams',
        sa.Column('team_name', sa.String(255), primary_key=True),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("team_name <> ''", name='ck_team_name_not_empty'),
    )

    # =========================================================================
    # USERS TABLE
    # =========================================================================
    op.create_table(
        'users',
        sa.Column('user_id', sa.String(255), primary_key=True),
        sa.Column('username', sa.String(255), nullable=False),
        sa.Column('team_name', sa.String(255), sa.ForeignKey('teams.team_name'), nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_users_team_name', 'users', ['team_name'])
    op.create_index('ix_users_team_active', 'users', ['team_name', 'is_active'])

    # =========================================================================
    # PULL REQUESTS TABLE
    # =========================================================================
    op.create_table(
        'pull_requests',
        sa.Column('pull_request_id', sa.String(255), primary_key=True),
        sa.Column('pull_request_name', sa.String(500), nullable=False),
        sa.Column('author_id', sa.String(255), sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('status', sa.String(16), nullable=False, server_default='OPEN'),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('merged_at', sa.DateTime, nullable=True),
        sa.CheckConstraint("status IN ('OPEN', 'MERGED')", name='ck_pull_request_status'),
    )
    op.create_index('ix_pull_requests_author_id', 'pull_requests', ['author_id'])
    op.create_index('ix_pull_requests_status', 'pull_requests', ['status'])

    # =========================================================================
    # PR REVIEWERS TABLE
    # =========================================================================
    op.create_table(
        'pr_reviewers',
        sa.Column(
            'pull_request_id',
            sa.String(255),
            sa.ForeignKey('pull_requests.pull_request_id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('user_id', sa.String(255), sa.ForeignKey('users.user_id'), nullable=False),
        sa.PrimaryKeyConstraint('pull_request_id', 'user_id'),
    )
    op.create_index('ix_pr_reviewers_user_id', 'pr_reviewers', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_pr_reviewers_user_id', table_name='pr_reviewers')
    op.drop_table('pr_reviewers')
    op.drop_index('ix_pull_requests_status', table_name='pull_requests')
    op.drop_index('ix_pull_requests_author_id', table_name='pull_requests')
    op.drop_table('pull_requests')
    op.drop_index('ix_users_team_active', table_name='users')
    op.drop_index('ix_users_team_name', table_name='users')
    op.drop_table('users')
    op.drop_table('teams')
