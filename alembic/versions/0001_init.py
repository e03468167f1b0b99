from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'products',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(20), nullable=False),
        sa.Column('description', sa.String(50), nullable=False),
        sa.Column('stock_quantity', sa.Integer, nullable=False, server_default=sa.text('0')),
        sa.Column('low_stock_threshold', sa.Integer, nullable=False, server_default=sa.text('10')),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('stock_quantity >= 0', name='ck_products_stock_quantity_non_negative'),
        sa.CheckConstraint('stock_quantity <= 2147483647', name='ck_products_stock_quantity_max'),
        sa.CheckConstraint('low_stock_threshold >= 0', name='ck_products_low_stock_threshold_non_negative'),
    )
    op.create_index('ix_products_stock_quantity', 'products', ['stock_quantity'])

def downgrade():
    op.drop_index('ix_products_stock_quantity', table_name='products')
    op.drop_table('products')
