"""Store snapshots: single-row full-state persistence

Revision ID: 20261017_snapshots
Revises:
Create Date: 2026-10-17

This migration adds:
1. store_snapshots (key -> JSON payload, optimistic version_id)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261017_snapshots'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('store_snapshots',
        sa.Column('key', sa.String(length=64), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('schema_version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('key')
    )


def downgrade():
    op.drop_table('store_snapshots')
