"""create_invitation_tables

Revision ID: 5d2c81a7e4f0
Revises:
Create Date: 2026-10-17 09:12:44.310582

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '5d2c81a7e4f0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create organizations, invitations and user_products tables."""
    op.create_table('organizations',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table('invitations',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('code', sa.String(length=64), nullable=False),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('organization_id', sa.UUID(), nullable=False),
        sa.Column('requested_products', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('invitee_email', sa.String(length=255), nullable=True),
        sa.Column('invitee_name', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_by', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('accepted_by', sa.UUID(), nullable=True),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("kind IN ('product', 'guard')", name='ck_invitations_kind'),
        sa.CheckConstraint("status IN ('pending', 'accepted', 'expired', 'revoked')", name='ck_invitations_status'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('kind', 'code', name='uq_invitations_kind_code'),
    )
    # Code lookups span both kinds
    op.create_index('ix_invitations_code', 'invitations', ['code'], unique=False)
    # Sweeper scans pending rows by expiry
    op.create_index('ix_invitations_status_expires_at', 'invitations', ['status', 'expires_at'], unique=False)

    op.create_table('user_products',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('product_id', sa.String(length=64), nullable=False),
        sa.Column('organization_id', sa.UUID(), nullable=False),
        sa.Column('granted_by', sa.UUID(), nullable=True),
        sa.Column('granted_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'product_id', name='uq_user_products_user_product'),
    )
    op.create_index('ix_user_products_user_id', 'user_products', ['user_id'], unique=False)


def downgrade() -> None:
    """Drop invitation tables."""
    op.drop_index('ix_user_products_user_id', table_name='user_products')
    op.drop_table('user_products')
    op.drop_index('ix_invitations_status_expires_at', table_name='invitations')
    op.drop_index('ix_invitations_code', table_name='invitations')
    op.drop_table('invitations')
    op.drop_table('organizations')
