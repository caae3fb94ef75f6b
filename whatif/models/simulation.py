"""
Simulation Set Models

This module defines the database models for stored what-if simulations:
- Simulation sets (named collections of scenarios)
- Scenarios (one course-planning case within a set)
- Assignments (homework/project workload blocks of a scenario)
- Stress metrics (precomputed workload stress snapshots of a scenario)

Scenarios are identified by the composite key (case_id, scenario_id); their
children reference them through a composite foreign key. Every level cascades
on delete.
"""

from sqlalchemy import (
    Column, Integer, String, Text, Boolean, Numeric, DateTime, JSON,
    ForeignKey, ForeignKeyConstraint, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from whatif.models import Base


def utcnow():
    return datetime.now(timezone.utc)


class SimulationSet(Base):
    """
    Model for a named collection of scenarios.

    Attributes:
        case_id: Primary key, server-generated UUID string
        name: User-defined name for the set
        kind: Optional free-text category
        description: Optional description
        created_at: When the set was created
        updated_at: When the set was last updated
    """
    __tablename__ = "simulation_sets"

    case_id = Column(String(36), primary_key=True)
    name = Column(Text, nullable=False)
    kind = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    scenarios = relationship(
        "Scenario",
        back_populates="simulation_set",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Scenario.scenario_id",
    )


class Scenario(Base):
    """
    Model for one course-planning case within a simulation set.

    scenario_id is supplied by the caller and is only unique inside its set.
    Decimal columns keep fixed-point precision (success rate 5.2, grade 3.2).
    """
    __tablename__ = "scenarios"

    case_id = Column(
        String(36),
        ForeignKey("simulation_sets.case_id", ondelete="CASCADE"),
        primary_key=True,
    )
    scenario_id = Column(Integer, primary_key=True, autoincrement=False)
    description = Column(Text, nullable=True)

    # Course info
    course_name = Column(Text, nullable=False)
    course_id = Column(Text, nullable=True)
    teaching_total_hours = Column(Integer, nullable=False)
    teaching_days = Column(JSON, nullable=True)  # ordered list of weekday names
    teaching_time = Column(Text, nullable=True)
    lab_total_hours = Column(Integer, nullable=False)
    lab_days = Column(JSON, nullable=True)
    lab_time = Column(Text, nullable=True)
    ects = Column(Integer, nullable=False)
    topic_difficulty = Column(Integer, nullable=False)
    prerequisites = Column(Boolean, nullable=False)
    weekly_homework_hours = Column(Integer, nullable=False)
    total_weeks = Column(Integer, nullable=False)
    attendance_method = Column(Text, nullable=False)
    success_rate_percent = Column(Numeric(5, 2, asdecimal=True), nullable=False)
    average_grade = Column(Numeric(3, 2, asdecimal=True), nullable=False)
    student_count = Column(Integer, nullable=False)

    # Current status
    current_week = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    simulation_set = relationship("SimulationSet", back_populates="scenarios")
    assignments = relationship(
        "Assignment",
        back_populates="scenario",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Assignment.assignment_number",
    )
    stress_metrics = relationship(
        "StressMetrics",
        back_populates="scenario",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [StressMetrics.calculated_at, StressMetrics.stress_metric_id],
    )

    @property
    def current_stress_metrics(self):
        """Earliest calculated snapshot, or None when the scenario has none."""
        return self.stress_metrics[0] if self.stress_metrics else None


class Assignment(Base):
    """Homework/project block of a scenario, numbered per scenario by the caller."""
    __tablename__ = "assignments"
    __table_args__ = (
        ForeignKeyConstraint(
            ["case_id", "scenario_id"],
            ["scenarios.case_id", "scenarios.scenario_id"],
            ondelete="CASCADE",
        ),
        UniqueConstraint(
            "case_id", "scenario_id", "assignment_number",
            name="uq_assignments_scenario_number",
        ),
    )

    assignment_id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(String(36), nullable=False)
    scenario_id = Column(Integer, nullable=False)
    assignment_number = Column(Integer, nullable=False)
    start_week = Column(Integer, nullable=True)
    end_week = Column(Integer, nullable=False)
    hours_per_week = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationship
    scenario = relationship("Scenario", back_populates="assignments")


class StressMetrics(Base):
    """
    Workload stress snapshot of a scenario, computed outside this service.

    All four values are fixed-point with 4 digits, 2 of them fractional.
    """
    __tablename__ = "stress_metrics"
    __table_args__ = (
        ForeignKeyConstraint(
            ["case_id", "scenario_id"],
            ["scenarios.case_id", "scenarios.scenario_id"],
            ondelete="CASCADE",
        ),
        Index("ix_stress_metrics_scenario", "case_id", "scenario_id"),
    )

    stress_metric_id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(String(36), nullable=False)
    scenario_id = Column(Integer, nullable=False)
    current_week_average = Column(Numeric(4, 2, asdecimal=True), nullable=True)
    current_week_maximum = Column(Numeric(4, 2, asdecimal=True), nullable=True)
    predicted_next_week_average = Column(Numeric(4, 2, asdecimal=True), nullable=True)
    predicted_next_week_maximum = Column(Numeric(4, 2, asdecimal=True), nullable=True)
    calculated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationship
    scenario = relationship("Scenario", back_populates="stress_metrics")
