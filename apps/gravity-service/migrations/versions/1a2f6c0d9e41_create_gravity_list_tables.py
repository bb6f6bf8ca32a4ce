"""create gravity list tables

Revision ID: 1a2f6c0d9e41
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '1a2f6c0d9e41'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('date_added', sa.Integer(), nullable=False),
        sa.Column('date_modified', sa.Integer(), nullable=False),
    ]


def _by_group(table: str, fk: str, parent: str) -> None:
    op.create_table(
        table,
        sa.Column(fk, sa.Integer(), nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint([fk], [f'{parent}.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['group_id'], ['group.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint(fk, 'group_id'),
    )


def upgrade() -> None:
    op.create_table(
        'group',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_table(
        'adlist',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('address', sa.String(), nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('address'),
    )
    op.create_table(
        'client',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('ip', sa.String(), nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('ip'),
    )
    op.create_table(
        'domainlist',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('type', sa.Integer(), nullable=False),
        sa.Column('domain', sa.String(), nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('domain', 'type', name='uq_domainlist_domain_type'),
        sa.CheckConstraint('type in (0, 1, 2, 3)', name='ck_domainlist_type'),
    )
    op.create_index('idx_domainlist_type', 'domainlist', ['type'], unique=False)

    _by_group('adlist_by_group', 'adlist_id', 'adlist')
    _by_group('client_by_group', 'client_id', 'client')
    _by_group('domainlist_by_group', 'domainlist_id', 'domainlist')


def downgrade() -> None:
    op.drop_table('domainlist_by_group')
    op.drop_table('client_by_group')
    op.drop_table('adlist_by_group')
    op.drop_index('idx_domainlist_type', table_name='domainlist')
    op.drop_table('domainlist')
    op.drop_table('client')
    op.drop_table('adlist')
    op.drop_table('group')
