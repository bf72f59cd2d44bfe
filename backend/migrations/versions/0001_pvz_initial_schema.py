"""pvz initial schema

Revision ID: 0001_pvz_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates the pickup point / reception / product schema:
- pickup_points: root identity receptions attach to
- receptions: intake sessions; at most one in_progress per pickup point,
  enforced by a partial unique index
- products: per-reception append-only sequence (LIFO removal by max sequence)
- audit_events: append-only audit trail
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_pvz_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # pickup_points
    # ============================================================================
    op.create_table(
        'pickup_points',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('registration_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pickup_points_registered', 'pickup_points', ['registration_date'])

    # ============================================================================
    # receptions
    # ============================================================================
    op.create_table(
        'receptions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('date_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('pickup_point_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.CheckConstraint("status IN ('in_progress', 'close')", name='ck_receptions_status'),
        sa.ForeignKeyConstraint(['pickup_point_id'], ['pickup_points.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_receptions_date_time', 'receptions', ['date_time'])
    op.create_index('ix_receptions_pvz_date_time', 'receptions', ['pickup_point_id', 'date_time'])

    # One open reception per pickup point, enforced by the database
    op.create_index(
        'uq_receptions_one_open_per_pvz',
        'receptions',
        ['pickup_point_id'],
        unique=True,
        sqlite_where=sa.text("status = 'in_progress'"),
        postgresql_where=sa.text("status = 'in_progress'"),
    )

    # ============================================================================
    # products
    # ============================================================================
    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('date_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('type', sa.String(length=32), nullable=False),
        sa.Column('reception_id', sa.Uuid(), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.CheckConstraint(
            "type IN ('electronics', 'clothing', 'food', 'other')",
            name='ck_products_type',
        ),
        sa.ForeignKeyConstraint(['reception_id'], ['receptions.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reception_id', 'sequence', name='uq_products_reception_sequence'),
    )
    op.create_index('ix_products_reception_id', 'products', ['reception_id'])

    # ============================================================================
    # audit_events
    # ============================================================================
    op.create_table(
        'audit_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.String(length=64), nullable=False),
        sa.Column('entity_type', sa.String(length=32), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=False),
        sa.Column('pickup_point_id', sa.Uuid(), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('note', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_audit_events_event_type', 'audit_events', ['event_type'])
    op.create_index('ix_audit_events_entity_id', 'audit_events', ['entity_id'])
    op.create_index('ix_audit_events_pvz_occurred', 'audit_events', ['pickup_point_id', 'occurred_at'])


def downgrade():
    op.drop_index('ix_audit_events_pvz_occurred', table_name='audit_events')
    op.drop_index('ix_audit_events_entity_id', table_name='audit_events')
    op.drop_index('ix_audit_events_event_type', table_name='audit_events')
    op.drop_table('audit_events')

    op.drop_index('ix_products_reception_id', table_name='products')
    op.drop_table('products')

    op.drop_index('uq_receptions_one_open_per_pvz', table_name='receptions')
    op.drop_index('ix_receptions_pvz_date_time', table_name='receptions')
    op.drop_index('ix_receptions_date_time', table_name='receptions')
    op.drop_table('receptions')

    op.drop_index('ix_pickup_points_registered', table_name='pickup_points')
    op.drop_table('pickup_points')
