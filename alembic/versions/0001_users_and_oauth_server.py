"""Create users and OAuth2 server tables

Revision ID: 0001_users_and_oauth_server
Revises:
Create Date: 2026-09-28 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_users_and_oauth_server'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, clients, scopes and access/refresh token records."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=True),
        sa.Column('google_id', sa.String(length=64), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_google_id', 'users', ['google_id'], unique=True)

    op.create_table(
        'oauth_clients',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('secret_hash', sa.String(length=255), nullable=True),
        sa.Column('redirect_uris', sa.JSON(), nullable=True),
        sa.Column('grant_types', sa.JSON(), nullable=True),
        sa.Column('scopes', sa.JSON(), nullable=True),
        sa.Column('revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_oauth_clients'),
    )

    op.create_table(
        'oauth_scopes',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('grant_types', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_oauth_scopes'),
    )

    op.create_table(
        'oauth_access_tokens',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('client_id', sa.String(length=100), nullable=False),
        sa.Column('scopes', sa.JSON(), nullable=True),
        sa.Column('revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name='fk_oauth_access_tokens_user_id_users', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['client_id'], ['oauth_clients.id'],
            name='fk_oauth_access_tokens_client_id_oauth_clients', ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_oauth_access_tokens'),
    )
    op.create_index('ix_oauth_access_tokens_user_id', 'oauth_access_tokens', ['user_id'])
    op.create_index('ix_oauth_access_tokens_client_id', 'oauth_access_tokens', ['client_id'])
    op.create_index('ix_oauth_access_tokens_expires', 'oauth_access_tokens', ['expires_at'])

    op.create_table(
        'oauth_refresh_tokens',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('access_token_id', sa.String(length=100), nullable=False),
        sa.Column('revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(
            ['access_token_id'], ['oauth_access_tokens.id'],
            name='fk_oauth_refresh_tokens_access_token_id_oauth_access_tokens', ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_oauth_refresh_tokens'),
    )
    op.create_index('ix_oauth_refresh_tokens_access_token_id', 'oauth_refresh_tokens', ['access_token_id'])


def downgrade() -> None:
    """Drop OAuth2 server tables and users."""
    op.drop_index('ix_oauth_refresh_tokens_access_token_id', table_name='oauth_refresh_tokens')
    op.drop_table('oauth_refresh_tokens')
    op.drop_index('ix_oauth_access_tokens_expires', table_name='oauth_access_tokens')
    op.drop_index('ix_oauth_access_tokens_client_id', table_name='oauth_access_tokens')
    op.drop_index('ix_oauth_access_tokens_user_id', table_name='oauth_access_tokens')
    op.drop_table('oauth_access_tokens')
    op.drop_table('oauth_scopes')
    op.drop_table('oauth_clients')
    op.drop_index('ix_users_google_id', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
