"""create production_orders, pauses and active_order_slot tables

Revision ID: 3c1f9a7e2b10
Revises: 
Create Date: 2026-03-10 09:12:41.518302

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3c1f9a7e2b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # 创建production_orders表
    op.create_table('production_orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_code', sa.String(length=64), nullable=False),
        sa.Column('article_code', sa.String(length=64), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('product_format', sa.String(length=255), nullable=True),
        sa.Column('product_type', sa.String(length=255), nullable=True),
        sa.Column('container_type', sa.String(length=255), nullable=True),
        sa.Column('target_quantity', sa.Integer(), nullable=False),
        sa.Column('target_boxes', sa.Integer(), nullable=False),
        sa.Column('units_per_box', sa.Integer(), nullable=True),
        sa.Column('estimated_production_hours', sa.Float(), nullable=True),
        sa.Column('state', sa.Enum('created', 'started', 'paused', 'finished', name='order_state', native_enum=False), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=True),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        sa.Column('good_units', sa.Integer(), nullable=False),
        sa.Column('counted_boxes', sa.Integer(), nullable=False),
        sa.Column('rejected_units', sa.Integer(), nullable=False),
        sa.Column('weight_scale_units', sa.Integer(), nullable=False),
        sa.Column('operator_units', sa.Integer(), nullable=False),
        sa.Column('weight_scale_total', sa.Integer(), nullable=False),
        sa.Column('recovered_units', sa.Integer(), nullable=True),
        sa.Column('weight_recirculation', sa.Integer(), nullable=True),
        sa.Column('weight_recovery_rate', sa.Float(), nullable=True),
        sa.Column('accumulated_paused_minutes', sa.Integer(), nullable=False),
        sa.Column('repercap', sa.Boolean(), nullable=False),
        sa.Column('initial_cut_number', sa.Integer(), nullable=True),
        sa.Column('final_cut_number', sa.Integer(), nullable=True),
        sa.Column('closing_good_units', sa.Integer(), nullable=True),
        sa.Column('closing_bad_units', sa.Integer(), nullable=True),
        sa.Column('total_units', sa.Integer(), nullable=True),
        sa.Column('total_minutes', sa.Integer(), nullable=True),
        sa.Column('active_minutes', sa.Integer(), nullable=True),
        sa.Column('paused_minutes', sa.Integer(), nullable=True),
        sa.Column('paused_percent', sa.Float(), nullable=True),
        sa.Column('good_percent', sa.Float(), nullable=True),
        sa.Column('bad_percent', sa.Float(), nullable=True),
        sa.Column('completion_percent', sa.Float(), nullable=True),
        sa.Column('rejection_rate', sa.Float(), nullable=True),
        sa.Column('repercap_recirculation', sa.Integer(), nullable=True),
        sa.Column('repercap_recovery_rate', sa.Float(), nullable=True),
        sa.Column('actual_rate', sa.Float(), nullable=True),
        sa.Column('actual_vs_theoretical', sa.Float(), nullable=True),
        sa.Column('availability', sa.Float(), nullable=True),
        sa.Column('performance', sa.Float(), nullable=True),
        sa.Column('quality', sa.Float(), nullable=True),
        sa.Column('oee', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_production_orders_id'), 'production_orders', ['id'], unique=False)
    op.create_index(op.f('ix_production_orders_order_code'), 'production_orders', ['order_code'], unique=True)

    # 创建pauses表
    op.create_table('pauses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('pause_type', sa.String(length=64), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('counts_toward_downtime', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['production_orders.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_pauses_id'), 'pauses', ['id'], unique=False)
    op.create_index(op.f('ix_pauses_order_id'), 'pauses', ['order_id'], unique=False)

    # 创建active_order_slot表（单行）
    op.create_table('active_order_slot',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['production_orders.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id')
    )


def downgrade():
    op.drop_table('active_order_slot')
    op.drop_index(op.f('ix_pauses_order_id'), table_name='pauses')
    op.drop_index(op.f('ix_pauses_id'), table_name='pauses')
    op.drop_table('pauses')
    op.drop_index(op.f('ix_production_orders_order_code'), table_name='production_orders')
    op.drop_index(op.f('ix_production_orders_id'), table_name='production_orders')
    op.drop_table('production_orders')
