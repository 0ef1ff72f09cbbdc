"""Initial schema: set jobs, job items, barcode pool, component sources

Revision ID: 001
Revises: 
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create set_jobs table
    op.create_table(
        'set_jobs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('requested_by', sa.Integer(), nullable=False),
        sa.Column('set_type', sa.String(length=100), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=True, server_default='open'),
        sa.Column('new_item_id', sa.Integer(), nullable=True),
        sa.Column('new_variant_id', sa.Integer(), nullable=True),
        sa.Column('barcode', sa.String(length=50), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('barcode')
    )
    op.create_index(op.f('ix_set_jobs_id'), 'set_jobs', ['id'], unique=False)
    op.create_index(op.f('ix_set_jobs_status'), 'set_jobs', ['status'], unique=False)
    op.create_index(op.f('ix_set_jobs_created_at'), 'set_jobs', ['created_at'], unique=False)

    # Create set_job_items table
    op.create_table(
        'set_job_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('set_job_id', sa.Integer(), nullable=False),
        sa.Column('variant_id', sa.Integer(), nullable=False),
        sa.Column('sort_index', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['set_job_id'], ['set_jobs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('set_job_id', 'sort_index', name='uix_set_job_item_position'),
        sa.CheckConstraint('variant_id > 0', name='chk_set_job_item_variant_positive')
    )
    op.create_index(op.f('ix_set_job_items_id'), 'set_job_items', ['id'], unique=False)
    op.create_index(op.f('ix_set_job_items_set_job_id'), 'set_job_items', ['set_job_id'], unique=False)
    op.create_index(op.f('ix_set_job_items_variant_id'), 'set_job_items', ['variant_id'], unique=False)

    # Create set_barcodes table
    op.create_table(
        'set_barcodes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('barcode', sa.String(length=50), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('used_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('barcode')
    )
    op.create_index(op.f('ix_set_barcodes_id'), 'set_barcodes', ['id'], unique=False)
    op.create_index(op.f('ix_set_barcodes_used'), 'set_barcodes', ['used'], unique=False)

    # Create component_items table (filled by the ERP sync)
    op.create_table(
        'component_items',
        sa.Column('variant_id', sa.Integer(), nullable=False),
        sa.Column('name1', sa.String(length=500), nullable=True),
        sa.Column('name2', sa.String(length=500), nullable=True),
        sa.Column('name3', sa.String(length=500), nullable=True),
        sa.Column('short_description', sa.Text(), nullable=True),
        sa.Column('description_html', sa.Text(), nullable=True),
        sa.Column('external_item_id', sa.String(length=255), nullable=True),
        sa.Column('model', sa.String(length=255), nullable=True),
        sa.Column('variant_name', sa.String(length=255), nullable=True),
        sa.Column('purchase_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('weight_g', sa.Integer(), nullable=True),
        sa.Column('width_mm', sa.Integer(), nullable=True),
        sa.Column('length_mm', sa.Integer(), nullable=True),
        sa.Column('height_mm', sa.Integer(), nullable=True),
        sa.Column('producer_name', sa.String(length=255), nullable=True),
        sa.Column('image_urls', sa.Text(), nullable=True),
        sa.Column('item_property_ids', sa.Text(), nullable=True),
        sa.Column('variation_property_ids', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('variant_id')
    )

    # Create component_prices table
    op.create_table(
        'component_prices',
        sa.Column('variant_id', sa.Integer(), nullable=False),
        sa.Column('gross_min_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('list_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('shop_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('ebay_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('amazon_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('manual_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('real_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('real_lowest_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('b2b_price', sa.Numeric(12, 2), nullable=True),
        sa.PrimaryKeyConstraint('variant_id')
    )


def downgrade() -> None:
    op.drop_table('component_prices')
    op.drop_table('component_items')
    op.drop_index(op.f('ix_set_barcodes_used'), table_name='set_barcodes')
    op.drop_index(op.f('ix_set_barcodes_id'), table_name='set_barcodes')
    op.drop_table('set_barcodes')
    op.drop_index(op.f('ix_set_job_items_variant_id'), table_name='set_job_items')
    op.drop_index(op.f('ix_set_job_items_set_job_id'), table_name='set_job_items')
    op.drop_index(op.f('ix_set_job_items_id'), table_name='set_job_items')
    op.drop_table('set_job_items')
    op.drop_index(op.f('ix_set_jobs_created_at'), table_name='set_jobs')
    op.drop_index(op.f('ix_set_jobs_status'), table_name='set_jobs')
    op.drop_index(op.f('ix_set_jobs_id'), table_name='set_jobs')
    op.drop_table('set_jobs')
