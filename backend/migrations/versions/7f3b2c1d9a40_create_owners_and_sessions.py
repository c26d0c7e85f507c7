"""create ev owners, vehicles and auth sessions

Revision ID: 7f3b2c1d9a40
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '7f3b2c1d9a40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'ev_owners',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('nic', sa.String(length=20), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('phone_number', sa.String(length=32), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_ev_owners'),
        sa.UniqueConstraint('nic', name='uq_ev_owners_nic'),
        sa.UniqueConstraint('email', name='uq_ev_owners_email'),
    )
    op.create_index('ix_ev_owners_is_active', 'ev_owners', ['is_active'])

    op.create_table(
        'ev_owner_vehicles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=32), nullable=False),
        sa.Column('make', sa.String(length=60), nullable=False),
        sa.Column('model', sa.String(length=60), nullable=False),
        sa.Column('license_plate', sa.String(length=20), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ['owner_id'],
            ['ev_owners.id'],
            name='fk_ev_owner_vehicles_owner_id_ev_owners',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_ev_owner_vehicles'),
    )
    op.create_index('ix_ev_owner_vehicles_owner_id', 'ev_owner_vehicles', ['owner_id'])

    op.create_table(
        'auth_sessions',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('owner_id', sa.String(length=32), nullable=False),
        sa.Column('user_type', sa.String(length=32), nullable=False),
        sa.Column('refresh_token', sa.String(length=128), nullable=False),
        sa.Column('refresh_token_expiry', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_auth_sessions'),
        sa.UniqueConstraint('refresh_token', name='uq_auth_sessions_refresh_token'),
    )
    op.create_index('ix_auth_sessions_owner_id', 'auth_sessions', ['owner_id'])


def downgrade():
    op.drop_index('ix_auth_sessions_owner_id', table_name='auth_sessions')
    op.drop_table('auth_sessions')
    op.drop_index('ix_ev_owner_vehicles_owner_id', table_name='ev_owner_vehicles')
    op.drop_table('ev_owner_vehicles')
    op.drop_index('ix_ev_owners_is_active', table_name='ev_owners')
    op.drop_table('ev_owners')
