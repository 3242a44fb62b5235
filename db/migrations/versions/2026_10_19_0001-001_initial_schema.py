"""Initial schema - restaurants, table_reservations, restaurant_closures, tables and restaurant_settings.

Revision ID: 001
Revises:
Create Date: 2026-10-19

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
    """Create initial database tables."""
    # Create restaurants table
    op.create_table(
        'restaurants',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('business_hours', sa.JSON(), nullable=True),
        sa.Column('settings', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_restaurants'))
    )

    # Create table_reservations table
    op.create_table(
        'table_reservations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('restaurant_id', sa.String(length=36), nullable=True),
        sa.Column('table_id', sa.String(length=36), nullable=True),
        sa.Column('customer_name', sa.String(length=100), nullable=False),
        sa.Column('customer_phone', sa.String(length=20), nullable=False),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('reservation_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default='120'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='confirmed'),
        sa.Column('special_requests', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_table_reservations'))
    )

    # Create indexes for table_reservations
    op.create_index(op.f('ix_table_reservations_restaurant_id'), 'table_reservations', ['restaurant_id'], unique=False)
    op.create_index(op.f('ix_table_reservations_customer_phone'), 'table_reservations', ['customer_phone'], unique=False)
    op.create_index(op.f('ix_table_reservations_reservation_time'), 'table_reservations', ['reservation_time'], unique=False)
    op.create_index(op.f('ix_table_reservations_status'), 'table_reservations', ['status'], unique=False)
    op.create_index('ix_table_reservations_status_time', 'table_reservations', ['status', 'reservation_time'], unique=False)
    op.create_index('ix_table_reservations_restaurant_time', 'table_reservations', ['restaurant_id', 'reservation_time'], unique=False)

    # Create restaurant_closures table
    op.create_table(
        'restaurant_closures',
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('date', name=op.f('pk_restaurant_closures'))
    )

    # Create tables table
    op.create_table(
        'tables',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='available'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tables'))
    )

    # Create restaurant_settings table
    op.create_table(
        'restaurant_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('open_time', sa.String(length=8), nullable=True),
        sa.Column('close_time', sa.String(length=8), nullable=True),
        sa.Column('slot_interval_min', sa.Integer(), nullable=True),
        sa.Column('dining_duration_min', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_restaurant_settings'))
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('restaurant_settings')
    op.drop_table('tables')
    op.drop_table('restaurant_closures')

    # Drop table_reservations indexes and table
    op.drop_index('ix_table_reservations_restaurant_time', table_name='table_reservations')
    op.drop_index('ix_table_reservations_status_time', table_name='table_reservations')
    op.drop_index(op.f('ix_table_reservations_status'), table_name='table_reservations')
    op.drop_index(op.f('ix_table_reservations_reservation_time'), table_name='table_reservations')
    op.drop_index(op.f('ix_table_reservations_customer_phone'), table_name='table_reservations')
    op.drop_index(op.f('ix_table_reservations_restaurant_id'), table_name='table_reservations')
    op.drop_table('table_reservations')

    op.drop_table('restaurants')
