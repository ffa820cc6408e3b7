"""Initial schema: users, categories, products and stock movements"""

from alembic import op
import sqlalchemy as sa

revision = '0001_base_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('category_id', sa.String(36), sa.ForeignKey('categories.id', ondelete='SET NULL')),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.CheckConstraint('quantity >= 0', name='ck_products_quantity_non_negative'),
        sa.CheckConstraint('price >= 0', name='ck_products_price_non_negative'),
    )

    op.create_table(
        'stock_movements',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('product_id', sa.String(36), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.Enum('IN', 'OUT', name='movement_type'), nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False),
        sa.Column('notes', sa.Text),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.CheckConstraint('quantity > 0', name='ck_stock_movements_quantity_positive'),
    )

    op.create_index('idx_products_category', 'products', ['category_id'])
    op.create_index('idx_stock_movements_product', 'stock_movements', ['product_id'])
    op.create_index('idx_stock_movements_created', 'stock_movements', ['created_at'])


def downgrade():
    op.drop_index('idx_stock_movements_created', table_name='stock_movements')
    op.drop_index('idx_stock_movements_product', table_name='stock_movements')
    op.drop_index('idx_products_category', table_name='products')
    op.drop_table('stock_movements')
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_table('users')
    sa.Enum(name='movement_type').drop(op.get_bind(), checkfirst=True)
