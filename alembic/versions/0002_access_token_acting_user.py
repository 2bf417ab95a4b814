"""Add acting_user_id and version_id to oauth_access_tokens

Revision ID: 0002_access_token_acting_user
Revises: 0001_users_and_oauth_server
Create Date: 2026-10-05 09:15:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0002_access_token_acting_user'
down_revision: Union[str, None] = '0001_users_and_oauth_server'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Record the user an access token acts for; version rows for optimistic locking."""
    with op.batch_alter_table('oauth_access_tokens') as batch_op:
        batch_op.add_column(sa.Column('acting_user_id', sa.Integer(), nullable=True))
        batch_op.add_column(sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'))
        batch_op.create_foreign_key(
            'fk_oauth_access_tokens_acting_user_id_users',
            'users',
            ['acting_user_id'],
            ['id'],
            ondelete='SET NULL',
        )


def downgrade() -> None:
    """Remove acting user tracking."""
    with op.batch_alter_table('oauth_access_tokens') as batch_op:
        batch_op.drop_constraint('fk_oauth_access_tokens_acting_user_id_users', type_='foreignkey')
        batch_op.drop_column('version_id')
        batch_op.drop_column('acting_user_id')
