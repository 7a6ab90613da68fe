"""create_exam_engine_schema

Revision ID: 3f1c9a2b7d40
Revises:
Create Date: 2026-10-19 10:12:07.418203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='student'),
        sa.Column('course', sa.String(64), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('approved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_course', 'users', ['course'])

    op.create_table('sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_jti', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_activity', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE')
    )
    op.create_index('ix_sessions_id', 'sessions', ['id'])
    op.create_index('ix_sessions_token_jti', 'sessions', ['token_jti'], unique=True)

    op.create_table('tests',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('course', sa.String(64), nullable=False),
        sa.Column('teacher_id', sa.Integer(), nullable=True),
        sa.Column('test_type', sa.String(20), nullable=False, server_default='custom'),
        sa.Column('stream', sa.String(10), nullable=True),
        sa.Column('sections_json', sa.Text(), nullable=False),
        sa.Column('phase1_minutes', sa.Integer(), nullable=False, server_default='90'),
        sa.Column('phase2_minutes', sa.Integer(), nullable=False, server_default='90'),
        sa.Column('custom_duration', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('show_answer_key', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('approved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('parent_test_id', sa.String(64), nullable=True),
        sa.Column('chunk_index', sa.Integer(), nullable=True),
        sa.Column('chunk_total', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['teacher_id'], ['users.id'], ondelete='SET NULL')
    )
    op.create_index('ix_tests_id', 'tests', ['id'])
    op.create_index('ix_tests_course', 'tests', ['course'])
    op.create_index('ix_tests_teacher_id', 'tests', ['teacher_id'])
    op.create_index('ix_tests_parent_test_id', 'tests', ['parent_test_id'])

    op.create_table('submissions',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('test_group_id', sa.String(64), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('answers_json', sa.Text(), nullable=False),
        sa.Column('section_results_json', sa.Text(), nullable=False),
        sa.Column('total_score', sa.Integer(), nullable=False),
        sa.Column('total_max_score', sa.Integer(), nullable=False),
        sa.Column('percentage', sa.Integer(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['student_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('test_group_id', 'student_id', name='uq_submission_group_student')
    )
    op.create_index('ix_submissions_id', 'submissions', ['id'])
    op.create_index('ix_submissions_test_group_id', 'submissions', ['test_group_id'])
    op.create_index('ix_submissions_student_id', 'submissions', ['student_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_submissions_student_id', table_name='submissions')
    op.drop_index('ix_submissions_test_group_id', table_name='submissions')
    op.drop_index('ix_submissions_id', table_name='submissions')
    op.drop_table('submissions')
    op.drop_index('ix_tests_parent_test_id', table_name='tests')
    op.drop_index('ix_tests_teacher_id', table_name='tests')
    op.drop_index('ix_tests_course', table_name='tests')
    op.drop_index('ix_tests_id', table_name='tests')
    op.drop_table('tests')
    op.drop_index('ix_sessions_token_jti', table_name='sessions')
    op.drop_index('ix_sessions_id', table_name='sessions')
    op.drop_table('sessions')
    op.drop_index('ix_users_course', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
