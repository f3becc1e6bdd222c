"""initial_marketplace_schema

Revision ID: 7c1e2f9a4b10
Revises:
Create Date: 2026-10-19 10:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '7c1e2f9a4b10'
down_revision = None
branch_labels = None
depends_on = None


def _base_columns():
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    """Create users, wallets, jobs, applications, ledger, score and outbox tables."""
    op.create_table(
        'users',
        *_base_columns(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('is_phone_verified', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('profile', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)

    op.create_table(
        'wallets',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('balance', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('escrow_balance', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('total_earnings', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('total_spent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.CheckConstraint('balance >= 0', name='ck_wallet_balance_non_negative'),
        sa.CheckConstraint('escrow_balance >= 0', name='ck_wallet_escrow_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_wallets_id'), 'wallets', ['id'], unique=False)
    op.create_index(op.f('ix_wallets_user_id'), 'wallets', ['user_id'], unique=True)

    op.create_table(
        'jobs',
        *_base_columns(),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('budget', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('duration', sa.String(length=50), nullable=True),
        sa.Column('skills_required', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('employer_id', sa.Uuid(), nullable=False),
        sa.Column('job_type', sa.String(length=20), nullable=False),
        sa.Column('location', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('positions_required', sa.Integer(), nullable=False),
        sa.Column('accepted_count', sa.Integer(), nullable=False),
        sa.Column('assigned_student_id', sa.Uuid(), nullable=True),
        sa.Column('assigned_students', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('closed_at', sa.DateTime(), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('cancellation_reason', sa.String(length=500), nullable=True),
        sa.Column('escrow_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('payment_released', sa.Boolean(), nullable=False),
        sa.Column('student_accepted', sa.Boolean(), nullable=False),
        sa.Column('student_approved', sa.Boolean(), nullable=False),
        sa.Column('employer_approved', sa.Boolean(), nullable=False),
        sa.Column('submission_requires_files', sa.Boolean(), nullable=False),
        sa.Column('submission', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('shortlist_multiplier', sa.Integer(), nullable=False),
        sa.Column('shortlist_window_hours', sa.Integer(), nullable=False),
        sa.Column('shortlist_window_ends_at', sa.DateTime(), nullable=True),
        sa.Column('shortlist_computed', sa.Boolean(), nullable=False),
        sa.Column('shortlisted_at', sa.DateTime(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.CheckConstraint('positions_required >= 1', name='ck_job_positions_required'),
        sa.CheckConstraint('escrow_amount >= 0', name='ck_job_escrow_non_negative'),
        sa.ForeignKeyConstraint(['employer_id'], ['users.id']),
        sa.ForeignKeyConstraint(['assigned_student_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_jobs_id'), 'jobs', ['id'], unique=False)
    op.create_index(op.f('ix_jobs_title'), 'jobs', ['title'], unique=False)
    op.create_index(op.f('ix_jobs_employer_id'), 'jobs', ['employer_id'], unique=False)
    op.create_index(op.f('ix_jobs_job_type'), 'jobs', ['job_type'], unique=False)
    op.create_index(op.f('ix_jobs_status'), 'jobs', ['status'], unique=False)
    op.create_index(op.f('ix_jobs_shortlist_window_ends_at'), 'jobs', ['shortlist_window_ends_at'], unique=False)
    op.create_index(op.f('ix_jobs_shortlist_computed'), 'jobs', ['shortlist_computed'], unique=False)

    op.create_table(
        'job_applications',
        *_base_columns(),
        sa.Column('job_id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('cover_letter', sa.String(length=2000), nullable=True),
        sa.Column('proposed_budget', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('profile_url', sa.String(length=1000), nullable=True),
        sa.Column('evaluation_score', sa.Integer(), nullable=False),
        sa.Column('evaluation_details', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('shortlisted', sa.Boolean(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('inspection_status', sa.String(length=20), nullable=True),
        sa.Column('inspection_result', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('inspection_error', sa.Text(), nullable=True),
        sa.Column('inspected_at', sa.DateTime(), nullable=True),
        sa.Column('inspection_attempts', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_id', 'student_id', name='unique_job_student_application'),
    )
    op.create_index(op.f('ix_job_applications_id'), 'job_applications', ['id'], unique=False)
    op.create_index(op.f('ix_job_applications_job_id'), 'job_applications', ['job_id'], unique=False)
    op.create_index(op.f('ix_job_applications_student_id'), 'job_applications', ['student_id'], unique=False)
    op.create_index(op.f('ix_job_applications_inspection_status'), 'job_applications', ['inspection_status'], unique=False)

    op.create_table(
        'transactions',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('job_id', sa.Uuid(), nullable=True),
        sa.Column('related_user_id', sa.Uuid(), nullable=True),
        sa.Column('gateway', sa.String(length=50), nullable=True),
        sa.Column('gateway_order_id', sa.String(length=255), nullable=True),
        sa.Column('gateway_payment_id', sa.String(length=255), nullable=True),
        sa.Column('gateway_signature', sa.String(length=255), nullable=True),
        sa.Column('commission_rate', sa.Numeric(precision=5, scale=4), nullable=True),
        sa.Column('commission_amount', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('extra_data', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('failure_reason', sa.Text(), nullable=True),
        sa.Column('initiated_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('failed_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('amount > 0', name='ck_transaction_amount_positive'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id']),
        sa.ForeignKeyConstraint(['related_user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_transactions_id'), 'transactions', ['id'], unique=False)
    op.create_index(op.f('ix_transactions_user_id'), 'transactions', ['user_id'], unique=False)
    op.create_index(op.f('ix_transactions_type'), 'transactions', ['type'], unique=False)
    op.create_index(op.f('ix_transactions_status'), 'transactions', ['status'], unique=False)
    op.create_index(op.f('ix_transactions_job_id'), 'transactions', ['job_id'], unique=False)
    op.create_index(op.f('ix_transactions_gateway_order_id'), 'transactions', ['gateway_order_id'], unique=False)

    op.create_table(
        'platform_settings',
        *_base_columns(),
        sa.Column('key', sa.String(length=50), nullable=False),
        sa.Column('platform_user_id', sa.Uuid(), nullable=True),
        sa.Column('extra_data', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('key'),
    )
    op.create_index(op.f('ix_platform_settings_id'), 'platform_settings', ['id'], unique=False)

    op.create_table(
        'score_logs',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('event', sa.String(length=50), nullable=False),
        sa.Column('delta', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(length=500), nullable=True),
        sa.Column('meta', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_score_logs_id'), 'score_logs', ['id'], unique=False)
    op.create_index(op.f('ix_score_logs_user_id'), 'score_logs', ['user_id'], unique=False)
    op.create_index(op.f('ix_score_logs_event'), 'score_logs', ['event'], unique=False)

    op.create_table(
        'notification_outbox',
        *_base_columns(),
        sa.Column('event', sa.String(length=50), nullable=False),
        sa.Column('recipient_id', sa.Uuid(), nullable=False),
        sa.Column('sender_id', sa.Uuid(), nullable=True),
        sa.Column('job_id', sa.Uuid(), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('payload', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('dispatched_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['recipient_id'], ['users.id']),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id']),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_notification_outbox_id'), 'notification_outbox', ['id'], unique=False)
    op.create_index(op.f('ix_notification_outbox_event'), 'notification_outbox', ['event'], unique=False)
    op.create_index(op.f('ix_notification_outbox_recipient_id'), 'notification_outbox', ['recipient_id'], unique=False)
    op.create_index(op.f('ix_notification_outbox_status'), 'notification_outbox', ['status'], unique=False)


def downgrade() -> None:
    """Drop all marketplace tables."""
    op.drop_table('notification_outbox')
    op.drop_table('score_logs')
    op.drop_table('platform_settings')
    op.drop_table('transactions')
    op.drop_table('job_applications')
    op.drop_table('jobs')
    op.drop_table('wallets')
    op.drop_table('users')
