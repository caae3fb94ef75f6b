"""Create simulation set tables

Revision ID: 3f9a1c2d7b4e
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '3f9a1c2d7b4e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name):
    """Check if a table exists."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    """Create simulation_sets, scenarios, assignments and stress_metrics."""
    if not table_exists('simulation_sets'):
        op.create_table(
            'simulation_sets',
            sa.Column('case_id', sa.String(length=36), nullable=False),
            sa.Column('name', sa.Text(), nullable=False),
            sa.Column('kind', sa.Text(), nullable=True),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('case_id', name='pk_simulation_sets')
        )

    if not table_exists('scenarios'):
        op.create_table(
            'scenarios',
            sa.Column('case_id', sa.String(length=36), nullable=False),
            sa.Column('scenario_id', sa.Integer(), autoincrement=False, nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('course_name', sa.Text(), nullable=False),
            sa.Column('course_id', sa.Text(), nullable=True),
            sa.Column('teaching_total_hours', sa.Integer(), nullable=False),
            sa.Column('teaching_days', sa.JSON(), nullable=True),
            sa.Column('teaching_time', sa.Text(), nullable=True),
            sa.Column('lab_total_hours', sa.Integer(), nullable=False),
            sa.Column('lab_days', sa.JSON(), nullable=True),
            sa.Column('lab_time', sa.Text(), nullable=True),
            sa.Column('ects', sa.Integer(), nullable=False),
            sa.Column('topic_difficulty', sa.Integer(), nullable=False),
            sa.Column('prerequisites', sa.Boolean(), nullable=False),
            sa.Column('weekly_homework_hours', sa.Integer(), nullable=False),
            sa.Column('total_weeks', sa.Integer(), nullable=False),
            sa.Column('attendance_method', sa.Text(), nullable=False),
            sa.Column('success_rate_percent', sa.Numeric(precision=5, scale=2), nullable=False),
            sa.Column('average_grade', sa.Numeric(precision=3, scale=2), nullable=False),
            sa.Column('student_count', sa.Integer(), nullable=False),
            sa.Column('current_week', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(
                ['case_id'], ['simulation_sets.case_id'],
                name='fk_scenarios_case_id_simulation_sets', ondelete='CASCADE'
            ),
            sa.PrimaryKeyConstraint('case_id', 'scenario_id', name='pk_scenarios')
        )

    if not table_exists('assignments'):
        op.create_table(
            'assignments',
            sa.Column('assignment_id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('case_id', sa.String(length=36), nullable=False),
            sa.Column('scenario_id', sa.Integer(), nullable=False),
            sa.Column('assignment_number', sa.Integer(), nullable=False),
            sa.Column('start_week', sa.Integer(), nullable=True),
            sa.Column('end_week', sa.Integer(), nullable=False),
            sa.Column('hours_per_week', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(
                ['case_id', 'scenario_id'], ['scenarios.case_id', 'scenarios.scenario_id'],
                name='fk_assignments_scenario', ondelete='CASCADE'
            ),
            sa.PrimaryKeyConstraint('assignment_id', name='pk_assignments'),
            sa.UniqueConstraint(
                'case_id', 'scenario_id', 'assignment_number',
                name='uq_assignments_scenario_number'
            )
        )

    if not table_exists('stress_metrics'):
        op.create_table(
            'stress_metrics',
            sa.Column('stress_metric_id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('case_id', sa.String(length=36), nullable=False),
            sa.Column('scenario_id', sa.Integer(), nullable=False),
            sa.Column('current_week_average', sa.Numeric(precision=4, scale=2), nullable=True),
            sa.Column('current_week_maximum', sa.Numeric(precision=4, scale=2), nullable=True),
            sa.Column('predicted_next_week_average', sa.Numeric(precision=4, scale=2), nullable=True),
            sa.Column('predicted_next_week_maximum', sa.Numeric(precision=4, scale=2), nullable=True),
            sa.Column('calculated_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(
                ['case_id', 'scenario_id'], ['scenarios.case_id', 'scenarios.scenario_id'],
                name='fk_stress_metrics_scenario', ondelete='CASCADE'
            ),
            sa.PrimaryKeyConstraint('stress_metric_id', name='pk_stress_metrics')
        )
        with op.batch_alter_table('stress_metrics', schema=None) as batch_op:
            batch_op.create_index(
                'ix_stress_metrics_scenario', ['case_id', 'scenario_id'], unique=False
            )


def downgrade() -> None:
    """Drop the simulation tables, children first."""
    if table_exists('stress_metrics'):
        with op.batch_alter_table('stress_metrics', schema=None) as batch_op:
            batch_op.drop_index('ix_stress_metrics_scenario')
        op.drop_table('stress_metrics')
    if table_exists('assignments'):
        op.drop_table('assignments')
    if table_exists('scenarios'):
        op.drop_table('scenarios')
    if table_exists('simulation_sets'):
        op.drop_table('simulation_sets')
