"""reviews_inbox_and_dispatch_leases

Revision ID: a3d5e8b21c47
Revises: 7c1e2f9a4b10
Create Date: 2026-10-19 14:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'a3d5e8b21c47'
down_revision = '7c1e2f9a4b10'
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Add the reviews table, inbox read flags and the outbox delivery lease."""
    with op.batch_alter_table('notification_outbox') as batch_op:
        batch_op.add_column(sa.Column('claimed_at', sa.DateTime(), nullable=True))
        batch_op.add_column(sa.Column('is_read', sa.Boolean(), server_default=sa.false(), nullable=False))
        batch_op.add_column(sa.Column('read_at', sa.DateTime(), nullable=True))
    op.create_index(
        'ix_notification_outbox_recipient_read', 'notification_outbox', ['recipient_id', 'is_read'], unique=False
    )

    op.create_table(
        'reviews',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('job_id', sa.Uuid(), nullable=False),
        sa.Column('reviewer_id', sa.Uuid(), nullable=False),
        sa.Column('reviewee_id', sa.Uuid(), nullable=False),
        sa.Column('reviewer_role', sa.String(length=20), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.String(length=500), nullable=True),
        sa.Column('aspect_ratings', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('response_comment', sa.String(length=300), nullable=True),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('is_edited', sa.Boolean(), nullable=False),
        sa.Column('edited_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_review_rating_range'),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id']),
        sa.ForeignKeyConstraint(['reviewer_id'], ['users.id']),
        sa.ForeignKeyConstraint(['reviewee_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_id', 'reviewer_id', 'reviewee_id', name='unique_job_reviewer_reviewee'),
    )
    op.create_index(op.f('ix_reviews_id'), 'reviews', ['id'], unique=False)
    op.create_index(op.f('ix_reviews_job_id'), 'reviews', ['job_id'], unique=False)
    op.create_index(op.f('ix_reviews_reviewer_id'), 'reviews', ['reviewer_id'], unique=False)
    op.create_index(op.f('ix_reviews_reviewee_id'), 'reviews', ['reviewee_id'], unique=False)


def downgrade() -> None:
    """Drop reviews and the inbox/lease columns."""
    op.drop_table('reviews')
    op.drop_index('ix_notification_outbox_recipient_read', table_name='notification_outbox')
    with op.batch_alter_table('notification_outbox') as batch_op:
        batch_op.drop_column('read_at')
        batch_op.drop_column('is_read')
        batch_op.drop_column('claimed_at')
