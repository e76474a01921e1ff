"""Create planning ledger tables.

Creates reference data (account_items, services), scenarios, the plan
node tree, P/L entries and their append-only history.

Revision ID: a7c1e4f20b19
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a7c1e4f20b19'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


account_type = sa.Enum('revenue', 'cost_of_goods_sold', 'selling_general_admin', name='account_type')
plan_node_type = sa.Enum('initiative', 'project', 'sub_project', 'job', 'adjustment_buffer', name='plan_node_type')
entry_category = sa.Enum('plan', 'result', name='entry_category')
entry_change_type = sa.Enum('create', 'update', 'delete', name='entry_change_type')


def upgrade() -> None:
    # Reference data
    op.create_table(
        'account_items',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('code', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('account_type', account_type, nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )

    op.create_table(
        'services',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
    )

    # Scenarios
    op.create_table(
        'scenarios',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('is_locked', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_current', sa.Boolean(), nullable=False, server_default='false'),
        # Audit
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by', sa.String(), nullable=True),
        sa.CheckConstraint('start_date <= end_date', name='ck_scenarios_date_range'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_scenarios_start_date', 'scenarios', ['start_date'])
    # At most one current scenario
    op.create_index(
        'uq_scenarios_single_current', 'scenarios', ['is_current'],
        unique=True, postgresql_where=sa.text('is_current'), sqlite_where=sa.text('is_current = 1'),
    )

    # Plan tree
    op.create_table(
        'plan_nodes',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('scenario_id', sa.String(), nullable=False),
        sa.Column('parent_id', sa.String(), nullable=True),
        sa.Column('lineage_id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('node_type', plan_node_type, nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('service_id', sa.String(), nullable=True),
        # Audit
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by', sa.String(), nullable=True),
        sa.ForeignKeyConstraint(['scenario_id'], ['scenarios.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['parent_id'], ['plan_nodes.id']),
        sa.ForeignKeyConstraint(['service_id'], ['services.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_plan_nodes_scenario_id', 'plan_nodes', ['scenario_id'])
    op.create_index('ix_plan_nodes_parent_id', 'plan_nodes', ['parent_id'])
    op.create_index('ix_plan_nodes_lineage_id', 'plan_nodes', ['lineage_id'])
    op.create_index('ix_plan_nodes_service_id', 'plan_nodes', ['service_id'])
    op.create_index('ix_plan_nodes_scenario_order', 'plan_nodes', ['scenario_id', 'display_order', 'created_at'])

    # Entries
    op.create_table(
        'pl_entries',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('node_id', sa.String(), nullable=False),
        sa.Column('account_item_id', sa.String(), nullable=False),
        sa.Column('target_month', sa.Date(), nullable=False),
        sa.Column('entry_category', entry_category, nullable=False),
        sa.Column('amount', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        # Audit
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=False),
        sa.ForeignKeyConstraint(['node_id'], ['plan_nodes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['account_item_id'], ['account_items.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('node_id', 'account_item_id', 'target_month', 'entry_category', name='uq_pl_entries_cell'),
    )
    op.create_index('ix_pl_entries_node_id', 'pl_entries', ['node_id'])
    op.create_index('ix_pl_entries_account_item_id', 'pl_entries', ['account_item_id'])
    op.create_index('ix_pl_entries_node_category', 'pl_entries', ['node_id', 'entry_category'])

    # History (append-only, no FK to pl_entries)
    op.create_table(
        'pl_entry_histories',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('entry_id', sa.String(), nullable=False),
        sa.Column('change_type', entry_change_type, nullable=False),
        sa.Column('previous_amount', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('new_amount', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('changed_by', sa.String(), nullable=False),
        sa.Column('operation_source', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pl_entry_histories_entry_id', 'pl_entry_histories', ['entry_id'])
    op.create_index('ix_pl_entry_histories_changed_at', 'pl_entry_histories', ['changed_at'])


def downgrade() -> None:
    op.drop_index('ix_pl_entry_histories_changed_at', table_name='pl_entry_histories')
    op.drop_index('ix_pl_entry_histories_entry_id', table_name='pl_entry_histories')
    op.drop_table('pl_entry_histories')

    op.drop_index('ix_pl_entries_node_category', table_name='pl_entries')
    op.drop_index('ix_pl_entries_account_item_id', table_name='pl_entries')
    op.drop_index('ix_pl_entries_node_id', table_name='pl_entries')
    op.drop_table('pl_entries')

    op.drop_index('ix_plan_nodes_scenario_order', table_name='plan_nodes')
    op.drop_index('ix_plan_nodes_service_id', table_name='plan_nodes')
    op.drop_index('ix_plan_nodes_lineage_id', table_name='plan_nodes')
    op.drop_index('ix_plan_nodes_parent_id', table_name='plan_nodes')
    op.drop_index('ix_plan_nodes_scenario_id', table_name='plan_nodes')
    op.drop_table('plan_nodes')

    op.drop_index('uq_scenarios_single_current', table_name='scenarios')
    op.drop_index('ix_scenarios_start_date', table_name='scenarios')
    op.drop_table('scenarios')

    op.drop_table('services')
    op.drop_table('account_items')

    bind = op.get_bind()
    for enum_type in (entry_change_type, entry_category, plan_node_type, account_type):
        enum_type.drop(bind, checkfirst=True)
