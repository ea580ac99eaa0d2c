"""create cleaning_orders table

Revision ID: 8d2e4b6a91c3
Revises: 3c1f9a7e2b10
Create Date: 2026-10-19 10:04:27.193845

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '8d2e4b6a91c3'
down_revision = '3c1f9a7e2b10'
branch_labels = None
depends_on = None


def upgrade():
    # 创建cleaning_orders表
    op.create_table('cleaning_orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=True),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        sa.Column('duration_seconds', sa.Integer(), nullable=True),
        sa.Column('state', sa.Enum('created', 'started', 'finished', name='cleaning_state', native_enum=False), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_cleaning_orders_id'), 'cleaning_orders', ['id'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_cleaning_orders_id'), table_name='cleaning_orders')
    op.drop_table('cleaning_orders')
