"""create storefront tables

Revision ID: 0001_create_storefront
Revises: 
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

revision = '0001_create_storefront'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        'buyers',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('password_hash', sa.String(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'sellers',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('store_name', sa.String(length=255), nullable=False),
        sa.Column('gst_number', sa.String(length=64), nullable=False),
        sa.Column('business_type', sa.String(length=100), nullable=False),
        sa.Column('business_address', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'product_categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('slug', sa.String(length=120), nullable=False),
    )
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('image_url', sa.String(length=512), nullable=True),
        sa.Column('seller_id', sa.String(length=36), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('price >= 0', name='ck_products_price_nonneg'),
        sa.CheckConstraint('stock >= 0', name='ck_products_stock_nonneg'),
    )
    op.create_index('ix_products_category_created', 'products', ['category', 'created_at'])
    op.create_table(
        'cart_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('product_name', sa.String(length=255), nullable=True),
        sa.Column('product_description', sa.Text(), nullable=True),
        sa.Column('product_price', sa.Numeric(10, 2), nullable=True),
        sa.Column('product_image', sa.String(length=512), nullable=True),
        sa.Column('product_category', sa.String(length=100), nullable=True),
        sa.Column('seller_id', sa.String(length=36), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'product_id', name='uq_cart_user_product'),
        sa.CheckConstraint('quantity > 0', name='ck_cartitem_quantity_pos'),
    )
    op.create_index('ix_cart_items_user', 'cart_items', ['user_id'])


def downgrade():
    op.drop_index('ix_cart_items_user', table_name='cart_items')
    op.drop_table('cart_items')
    op.drop_index('ix_products_category_created', table_name='products')
    op.drop_table('products')
    op.drop_table('product_categories')
    op.drop_table('sellers')
    op.drop_table('buyers')
