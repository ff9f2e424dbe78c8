"""Initial schema - inventory items with per-platform listing state

Revision ID: 001_inventory_items
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_inventory_items'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        'inventory_items',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=False), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=False), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('sku', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('condition', sa.String(), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('price', sa.Float(), nullable=True),
        sa.Column('qty', sa.Integer(), nullable=False),
        sa.Column('upc', sa.String(), nullable=True),
        sa.Column('isbn', sa.String(), nullable=True),
        sa.Column('images', JSONType, nullable=True),
        sa.Column('tags', JSONType, nullable=True),
        sa.Column('added', sa.Date(), nullable=True),
        sa.Column('platforms', JSONType, nullable=True),
        sa.Column('platform_status', JSONType, nullable=True),
        sa.Column('platform_listing_dates', JSONType, nullable=True),
        sa.Column('platform_listing_expiry', JSONType, nullable=True),
        sa.Column('last_relisted', JSONType, nullable=True),
        sa.Column('external_refs', JSONType, nullable=True),
        sa.Column('price_history', JSONType, nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_inventory_items_sku', 'inventory_items', ['sku'])
    op.create_index('ix_inventory_items_category', 'inventory_items', ['category'])


def downgrade() -> None:
    op.drop_index('ix_inventory_items_category', table_name='inventory_items')
    op.drop_index('ix_inventory_items_sku', table_name='inventory_items')
    op.drop_table('inventory_items')
