"""initial_schema

Revision ID: 3b7c9e1d2a40
Revises: 
Create Date: 2026-10-17 09:12:31.208114

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3b7c9e1d2a40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('records',
        sa.Column('id', sa.BigInteger(), sa.Identity(always=False), nullable=False),
        sa.Column('stage', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('value', sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id')
    )

    # Keyset indexes: sort column first, id as tie-breaker
    op.create_index(
        'records_created_desc',
        'records',
        ['created_at', 'id'],
        unique=False,
        postgresql_ops={'created_at': 'DESC', 'id': 'DESC'}
    )
    op.create_index(
        'records_stage_updated_desc',
        'records',
        ['stage', 'updated_at', 'id'],
        unique=False,
        postgresql_ops={'updated_at': 'DESC', 'id': 'DESC'}
    )
    op.create_index('records_status', 'records', ['status'], unique=False)


def downgrade() -> None:
    op.drop_index('records_status', table_name='records')
    op.drop_index('records_stage_updated_desc', table_name='records')
    op.drop_index('records_created_desc', table_name='records')
    op.drop_table('records')
