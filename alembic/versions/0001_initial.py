"""initial schema: users, crews, challenges, submissions, achievements

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

challenge_type = sa.Enum('carbon', 'food', 'recycling', 'shower', name='challenge_type_enum')
challenge_status = sa.Enum('active', 'completed', 'cancelled', name='challenge_status_enum')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=128), primary_key=True),
        sa.Column('display_name', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('total_score', sa.Float(), nullable=False, server_default='0'),
        sa.Column('level', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('level_progress', sa.Float(), nullable=False, server_default='0'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'achievements',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('key', sa.String(length=50), nullable=False, unique=True),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('icon_key', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'user_achievements',
        sa.Column('user_id', sa.String(length=128), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('achievement_id', sa.Integer(), sa.ForeignKey('achievements.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('unlocked_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'crews',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('leader_id', sa.String(length=128), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('join_code', sa.String(length=12), nullable=False),
        sa.Column('score', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_crews_join_code', 'crews', ['join_code'], unique=True)

    op.create_table(
        'crew_members',
        sa.Column('user_id', sa.String(length=128), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('crew_id', sa.String(length=36), sa.ForeignKey('crews.id', ondelete='CASCADE'), nullable=False),
        sa.Column('joined_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_crew_members_crew_id', 'crew_members', ['crew_id'])

    op.create_table(
        'challenges',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('type', challenge_type, nullable=False),
        sa.Column('crew_id', sa.String(length=36), sa.ForeignKey('crews.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_by', sa.String(length=128), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('duration_days', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('lower_score_is_better', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', challenge_status, nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_challenges_crew_id', 'challenges', ['crew_id'])

    op.create_table(
        'submissions',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=128), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('challenge_id', sa.String(length=36), sa.ForeignKey('challenges.id', ondelete='CASCADE'), nullable=False),
        sa.Column('crew_id', sa.String(length=36), sa.ForeignKey('crews.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', challenge_type, nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('score', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_submissions_user_id', 'submissions', ['user_id'])
    op.create_index('ix_submissions_challenge_id', 'submissions', ['challenge_id'])
    op.create_index('ix_submissions_crew_id', 'submissions', ['crew_id'])
    op.create_index('ix_submissions_created_at', 'submissions', ['created_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('submissions')
    op.drop_table('challenges')
    op.drop_table('crew_members')
    op.drop_table('crews')
    op.drop_table('user_achievements')
    op.drop_table('achievements')
    op.drop_table('users')
    challenge_status.drop(op.get_bind(), checkfirst=True)
    challenge_type.drop(op.get_bind(), checkfirst=True)
