"""create tab render aggregation tables

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

AGGREGATION_INTERVALS = (
    'minute', 'five_minute', 'hour', 'day', 'week', 'month', 'calendar_quarter', 'year'
)


def upgrade() -> None:
    """Create group/tab catalogs and the tab render aggregation table."""
    op.create_table(
        'aggr_group_mapping',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('group_service', sa.String(length=200), nullable=False),
        sa.Column('group_name', sa.String(length=200), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('group_service', 'group_name', name='uq_aggr_group_mapping')
    )

    op.create_table(
        'aggr_tab_mapping',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('fragment_name', sa.String(length=200), nullable=True),
        sa.Column('tab_name', sa.String(length=200), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('fragment_name', 'tab_name', name='uq_aggr_tab_mapping')
    )

    op.create_table(
        'tab_render_aggregation',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('interval', sa.Enum(*AGGREGATION_INTERVALS, name='aggregation_interval'), nullable=False),
        sa.Column('date_time', sa.DateTime(), nullable=False),
        sa.Column('aggregated_group_id', sa.Integer(), nullable=False),
        sa.Column('tab_mapping_id', sa.Integer(), nullable=False),
        sa.Column('render_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('duration', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['aggregated_group_id'], ['aggr_group_mapping.id']),
        sa.ForeignKeyConstraint(['tab_mapping_id'], ['aggr_tab_mapping.id']),
        sa.UniqueConstraint(
            'interval', 'date_time', 'aggregated_group_id', 'tab_mapping_id',
            name='uq_tab_render_aggregation'
        )
    )

    # Report queries filter by time range, then by (interval, group, tab)
    op.create_index('ix_tab_render_aggregation_date_time', 'tab_render_aggregation', ['date_time'])
    op.create_index(
        'ix_tab_render_aggregation_key',
        'tab_render_aggregation',
        ['interval', 'aggregated_group_id', 'tab_mapping_id']
    )


def downgrade() -> None:
    """Drop tab render aggregation tables."""
    op.drop_index('ix_tab_render_aggregation_key', table_name='tab_render_aggregation')
    op.drop_index('ix_tab_render_aggregation_date_time', table_name='tab_render_aggregation')
    op.drop_table('tab_render_aggregation')
    sa.Enum(name='aggregation_interval').drop(op.get_bind(), checkfirst=True)
    op.drop_table('aggr_tab_mapping')
    op.drop_table('aggr_group_mapping')
