"""create_members

Revision ID: 5a2e9c41d7b3
Revises: 
Create Date: 2026-10-19 09:14:02.318554

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5a2e9c41d7b3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('members',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('gender', sa.String(length=10), nullable=False),
        sa.Column('birthdate', sa.Date(), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('photo', sa.Text(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_by', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username', name='members_username_key'),
        sa.UniqueConstraint('user_id', name='members_user_id_key')
    )

    # Keyset index for load-more: name ASC, id DESC
    op.create_index(
        'members_name_id_keyset',
        'members',
        ['name', 'id'],
        unique=False,
        postgresql_ops={'id': 'DESC'}
    )


def downgrade() -> None:
    op.drop_index('members_name_id_keyset', table_name='members')
    op.drop_table('members')
