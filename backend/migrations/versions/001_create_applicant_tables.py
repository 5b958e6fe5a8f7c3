"""Create application and editing_request tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

Each table holds one JSON aggregate per applicant email.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create application and editing_request tables."""

    op.create_table(
        'application',
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('upload_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('payload', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('created_at', postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('updated_at', postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('email'),
        sa.CheckConstraint('upload_count >= 1', name='ck_application_upload_count_positive'),
    )
    op.create_index('ix_application_status', 'application', ['status'])
    op.create_index('ix_application_created_at', 'application', ['created_at'])

    op.create_table(
        'editing_request',
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('payment_status', sa.Text(), nullable=False, server_default='pending'),
        sa.Column('payload', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('created_at', postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('updated_at', postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('email'),
    )
    op.create_index('ix_editing_request_status', 'editing_request', ['status'])
    op.create_index('ix_editing_request_created_at', 'editing_request', ['created_at'])


def downgrade():
    """Drop applicant tables."""
    op.drop_index('ix_editing_request_created_at', table_name='editing_request')
    op.drop_index('ix_editing_request_status', table_name='editing_request')
    op.drop_table('editing_request')

    op.drop_index('ix_application_created_at', table_name='application')
    op.drop_index('ix_application_status', table_name='application')
    op.drop_table('application')
