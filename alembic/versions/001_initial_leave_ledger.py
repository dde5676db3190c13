"""Initial leave ledger schema

Revision ID: 001_initial_leave_ledger
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_leave_ledger'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    if 'leave_applications' in sa.inspect(op.get_bind()).get_table_names():
        return

    op.create_table(
        'leave_types',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_leave_types_id'), 'leave_types', ['id'], unique=False)
    op.create_index(op.f('ix_leave_types_name'), 'leave_types', ['name'], unique=True)

    op.create_table(
        'leave_groups',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('group_name', sa.String(length=150), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('group_name')
    )
    op.create_index(op.f('ix_leave_groups_id'), 'leave_groups', ['id'], unique=False)

    int_rules = [
        'allowed_balance', 'max_leave_balance_in_year', 'max_sanction_in_service_life',
        'max_forward_from_previous_year', 'interval_days_in_same_leave', 'max_limit_for_past_leave',
        'continuous_sanction', 'max_balance_for_encashment', 'min_day_count_for_requiring_attachment',
        'apply_future_leave_after_days',
    ]
    bool_rules = [
        'balance_forwarding', 'leave_allow_between_multiple_years', 'negative_balance',
        'continuous_days_allow', 'half_day', 'is_prefix_allowed', 'is_suffix_allowed',
        'does_requires_leave_attachment', 'allow_earn_leave',
    ]
    op.create_table(
        'leave_policies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('leave_group_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('leave_type_id', sa.Integer(), nullable=False),
        sa.Column('leave_type_name', sa.String(length=100), nullable=False),
        *[sa.Column(name, sa.Integer(), nullable=False, server_default='0') for name in int_rules],
        *[sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.false()) for name in bool_rules],
        sa.ForeignKeyConstraint(['leave_group_id'], ['leave_groups.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['leave_type_id'], ['leave_types.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('leave_group_id', 'leave_type_id', name='uq_leave_policies_group_type'),
        sa.CheckConstraint('allowed_balance >= 0', name='check_allowed_balance_non_negative')
    )
    op.create_index(op.f('ix_leave_policies_id'), 'leave_policies', ['id'], unique=False)
    op.create_index(op.f('ix_leave_policies_leave_group_id'), 'leave_policies', ['leave_group_id'], unique=False)

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('emp_code', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('leave_group_id', sa.Integer(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['leave_group_id'], ['leave_groups.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_employees_id'), 'employees', ['id'], unique=False)
    op.create_index(op.f('ix_employees_emp_code'), 'employees', ['emp_code'], unique=True)
    op.create_index(op.f('ix_employees_leave_group_id'), 'employees', ['leave_group_id'], unique=False)

    op.create_table(
        'holidays',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('date', name='uq_holiday_date')
    )
    op.create_index(op.f('ix_holidays_id'), 'holidays', ['id'], unique=False)
    op.create_index(op.f('ix_holidays_year'), 'holidays', ['year'], unique=False)
    op.create_index(op.f('ix_holidays_date'), 'holidays', ['date'], unique=False)

    op.create_table(
        'leave_applications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('employee_name', sa.String(), nullable=True),
        sa.Column('employee_code', sa.String(), nullable=True),
        sa.Column('leave_type', sa.String(length=100), nullable=False),
        sa.Column('from_date', sa.Date(), nullable=False),
        sa.Column('to_date', sa.Date(), nullable=False),
        sa.Column('half_day', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('requested_days', sa.Numeric(6, 2), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('attachment_ref', sa.String(), nullable=True),
        sa.Column('status', sa.Enum('Pending', 'Approved', 'Rejected', name='leave_status'), nullable=False, server_default='Pending'),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('decided_by', sa.String(), nullable=True),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('decision_remark', sa.Text(), nullable=True),
        sa.Column('policy_snapshot', sa.JSON(), nullable=True),
        sa.Column('policy_version', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('from_date <= to_date', name='check_from_date_le_to_date')
    )
    op.create_index(op.f('ix_leave_applications_id'), 'leave_applications', ['id'], unique=False)
    op.create_index(op.f('ix_leave_applications_employee_id'), 'leave_applications', ['employee_id'], unique=False)
    op.create_index(op.f('ix_leave_applications_leave_type'), 'leave_applications', ['leave_type'], unique=False)
    op.create_index('ix_leave_applications_employee_type', 'leave_applications', ['employee_id', 'leave_type'], unique=False)
    op.create_index('ix_leave_applications_employee_dates', 'leave_applications', ['employee_id', 'from_date', 'to_date'], unique=False)

    op.create_table(
        'leave_ledger_counters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('leave_type', sa.String(length=100), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'leave_type', name='uq_leave_ledger_counters_employee_type')
    )
    op.create_index(op.f('ix_leave_ledger_counters_id'), 'leave_ledger_counters', ['id'], unique=False)
    op.create_index(op.f('ix_leave_ledger_counters_employee_id'), 'leave_ledger_counters', ['employee_id'], unique=False)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('entity_type', sa.String(), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('meta_json', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_audit_logs_id'), 'audit_logs', ['id'], unique=False)
    op.create_index(op.f('ix_audit_logs_actor_id'), 'audit_logs', ['actor_id'], unique=False)


def downgrade() -> None:
    for table in (
        'audit_logs',
        'leave_ledger_counters',
        'leave_applications',
        'holidays',
        'employees',
        'leave_policies',
        'leave_groups',
        'leave_types',
    ):
        op.drop_table(table)
    sa.Enum(name='leave_status').drop(op.get_bind(), checkfirst=True)
