"""initial workshop schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17 00:00:00.000000

Creates the workshop schema from scratch:
- users: mirror of identity provider accounts, with dashboard role
- qr_tokens: single-use, time-limited QR login tokens (never deleted)
- shelf_locations / products / components: scannable lookup entities
- component_requests: pending -> fulfilled | cancelled lifecycle
- fulfillment_logs: one immutable row per fulfilled request
- product_events / activity_logs: append-only audit trails
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('first_name', sa.String(length=120), nullable=True),
        sa.Column('last_name', sa.String(length=120), nullable=True),
        sa.Column('profile_image_url', sa.String(length=512), nullable=True),
        sa.Column('role', sa.Enum('inventory', 'engineer', 'admin', name='user_role', native_enum=False), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    # ============================================================================
    # qr_tokens: redeemable iff used IS NULL AND now < expires_at
    # ============================================================================
    op.create_table(
        'qr_tokens',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('used', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_qr_tokens_token', 'qr_tokens', ['token'], unique=True)
    op.create_index('ix_qr_tokens_user_id', 'qr_tokens', ['user_id'])

    op.create_table(
        'shelf_locations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('location_name', sa.String(length=120), nullable=False),
        sa.Column('qr_code', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_shelf_locations_qr_code', 'shelf_locations', ['qr_code'], unique=True)

    op.create_table(
        'products',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('unique_repair_id', sa.String(length=64), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('problem_description', sa.Text(), nullable=False),
        sa.Column('is_repeated_item', sa.Boolean(), nullable=False),
        sa.Column('qr_code_data', sa.String(length=128), nullable=True),
        sa.Column('shelf_location_id', sa.String(length=36), nullable=True),
        sa.Column('status', sa.Enum('pending', 'in_progress', 'completed', name='product_status', native_enum=False), nullable=False),
        sa.Column('assigned_engineer_id', sa.String(length=36), nullable=True),
        sa.Column('created_by', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['shelf_location_id'], ['shelf_locations.id']),
        sa.ForeignKeyConstraint(['assigned_engineer_id'], ['users.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('unique_repair_id'),
    )
    op.create_index('ix_products_qr_code_data', 'products', ['qr_code_data'], unique=True)

    op.create_table(
        'components',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('component_name', sa.String(length=255), nullable=False),
        sa.Column('qr_code', sa.String(length=128), nullable=False),
        sa.Column('image_url', sa.String(length=512), nullable=True),
        sa.Column('datasheet_url', sa.String(length=512), nullable=True),
        sa.Column('shelf_location_id', sa.String(length=36), nullable=True),
        sa.Column('stock_quantity', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['shelf_location_id'], ['shelf_locations.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_components_qr_code', 'components', ['qr_code'], unique=True)

    # ============================================================================
    # component_requests: fulfilled_by/fulfilled_at set iff status = fulfilled
    # ============================================================================
    op.create_table(
        'component_requests',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('component_id', sa.String(length=36), nullable=False),
        sa.Column('requested_quantity', sa.Integer(), nullable=False),
        sa.Column('status', sa.Enum('pending', 'fulfilled', 'cancelled', name='component_request_status', native_enum=False), nullable=False),
        sa.Column('requested_by', sa.String(length=36), nullable=False),
        sa.Column('fulfilled_by', sa.String(length=36), nullable=True),
        sa.Column('fulfilled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('requested_quantity > 0', name='ck_component_requests_quantity_positive'),
        sa.CheckConstraint(
            "(status = 'fulfilled' AND fulfilled_by IS NOT NULL AND fulfilled_at IS NOT NULL)"
            " OR (status != 'fulfilled' AND fulfilled_by IS NULL AND fulfilled_at IS NULL)",
            name='ck_component_requests_fulfilled_fields',
        ),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.ForeignKeyConstraint(['component_id'], ['components.id']),
        sa.ForeignKeyConstraint(['requested_by'], ['users.id']),
        sa.ForeignKeyConstraint(['fulfilled_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_component_requests_status_created', 'component_requests', ['status', 'created_at'])
    op.create_index('ix_component_requests_requested_by', 'component_requests', ['requested_by'])

    op.create_table(
        'fulfillment_logs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('component_id', sa.String(length=36), nullable=False),
        sa.Column('request_id', sa.String(length=36), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('inventory_person_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.ForeignKeyConstraint(['component_id'], ['components.id']),
        sa.ForeignKeyConstraint(['request_id'], ['component_requests.id']),
        sa.ForeignKeyConstraint(['inventory_person_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('request_id', name='uq_fulfillment_logs_request_id'),
    )
    op.create_index('ix_fulfillment_logs_created', 'fulfillment_logs', ['created_at'])

    op.create_table(
        'product_events',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('event_type', sa.Enum(
            'received', 'assigned', 'component_requested', 'component_received', 'in_progress', 'completed',
            name='product_event_type', native_enum=False,
        ), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_product_events_product_created', 'product_events', ['product_id', 'created_at'])

    op.create_table(
        'activity_logs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity_type', sa.String(length=64), nullable=True),
        sa.Column('entity_id', sa.String(length=64), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_activity_logs_created', 'activity_logs', ['created_at'])
    op.create_index('ix_activity_logs_entity', 'activity_logs', ['entity_type', 'entity_id'])


def downgrade():
    op.drop_table('activity_logs')
    op.drop_table('product_events')
    op.drop_table('fulfillment_logs')
    op.drop_table('component_requests')
    op.drop_table('components')
    op.drop_table('products')
    op.drop_table('shelf_locations')
    op.drop_table('qr_tokens')
    op.drop_table('users')
