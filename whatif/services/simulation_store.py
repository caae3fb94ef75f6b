"""
Persistence for simulation sets.

Write path: insert a simulation set with all of its scenarios, assignments and
stress metrics in a single transaction.

Read path: load one simulation set with its full tree (selectin loading, one
query per level regardless of scenario count) and reshape it into the nested
camelCase document returned by the API.

Both functions take the session explicitly so callers decide which store they
run against.
"""

import uuid
from datetime import timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from whatif.logging_config import get_logger
from whatif.models.simulation import SimulationSet, Scenario, Assignment, StressMetrics
from whatif.schemas import SimulationSetCreate, ScenarioInput

logger = get_logger(__name__)


# ============================================================================
# WRITE PATH
# ============================================================================


def generate_case_id() -> str:
    return str(uuid.uuid4())


def _build_scenario(case_id: str, data: ScenarioInput) -> Scenario:
    """Map a submitted scenario (with children) onto ORM rows."""
    course = data.input
    scenario = Scenario(
        case_id=case_id,
        scenario_id=data.scenarioId,
        description=course.description,
        course_name=course.courseName,
        course_id=course.courseId,
        teaching_total_hours=course.teachingTotalHours,
        teaching_days=course.teachingDays,
        teaching_time=course.teachingTime,
        lab_total_hours=course.labTotalHours,
        lab_days=course.labDays,
        lab_time=course.labTime,
        ects=course.ects,
        topic_difficulty=course.topicDifficulty,
        prerequisites=course.prerequisites,
        weekly_homework_hours=course.weeklyHomeworkHours,
        total_weeks=course.totalWeeks,
        attendance_method=course.attendanceMethod,
        success_rate_percent=course.successRatePercent,
        average_grade=course.averageGrade,
        student_count=course.studentCount,
        current_week=course.currentWeek,
    )

    for a in data.assignments:
        scenario.assignments.append(Assignment(
            case_id=case_id,
            scenario_id=data.scenarioId,
            assignment_number=a.assignmentNumber,
            start_week=a.startWeek,
            end_week=a.endWeek,
            hours_per_week=a.hoursPerWeek,
        ))

    if data.stressMetrics is not None:
        metrics = data.stressMetrics
        scenario.stress_metrics.append(StressMetrics(
            case_id=case_id,
            scenario_id=data.scenarioId,
            current_week_average=metrics.currentWeekAverage,
            current_week_maximum=metrics.currentWeekMaximum,
            predicted_next_week_average=metrics.predictedNextWeekAverage,
            predicted_next_week_maximum=metrics.predictedNextWeekMaximum,
        ))

    return scenario


def create_simulation_set(db: Session, data: SimulationSetCreate) -> str:
    """
    Persist a simulation set and everything nested under it.

    All rows are flushed and committed together; on any failure the session
    is rolled back, nothing is persisted, and the exception propagates.

    Args:
        db: Database session
        data: Validated create payload

    Returns:
        The newly generated case id
    """
    case_id = generate_case_id()

    simulation_set = SimulationSet(
        case_id=case_id,
        name=data.name,
        kind=data.kind,
        description=data.description,
    )
    for scenario_data in data.scenarios:
        simulation_set.scenarios.append(_build_scenario(case_id, scenario_data))

    try:
        db.add(simulation_set)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Simulation set created: {data.name} (caseId: {case_id}) "
        f"with {len(data.scenarios)} scenario(s)"
    )
    return case_id


# ============================================================================
# READ PATH
# ============================================================================


def _to_number(value: Optional[Decimal]):
    """Decimals leave the service as plain JSON numbers."""
    return float(value) if value is not None else None


def _to_iso(value):
    """ISO-8601 with an explicit UTC offset. SQLite hands back naive values, which are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def serialize_assignment(assignment: Assignment) -> Dict[str, Any]:
    return {
        "assignmentId": assignment.assignment_id,
        "scenarioId": assignment.scenario_id,
        "caseId": assignment.case_id,
        "assignmentNumber": assignment.assignment_number,
        "startWeek": assignment.start_week,
        "endWeek": assignment.end_week,
        "hoursPerWeek": assignment.hours_per_week,
        "createdAt": _to_iso(assignment.created_at),
    }


def serialize_stress_metrics(metrics: Optional[StressMetrics]) -> Optional[Dict[str, Any]]:
    if metrics is None:
        return None
    return {
        "stressMetricId": metrics.stress_metric_id,
        "scenarioId": metrics.scenario_id,
        "caseId": metrics.case_id,
        "currentWeekAverage": _to_number(metrics.current_week_average),
        "currentWeekMaximum": _to_number(metrics.current_week_maximum),
        "predictedNextWeekAverage": _to_number(metrics.predicted_next_week_average),
        "predictedNextWeekMaximum": _to_number(metrics.predicted_next_week_maximum),
        "calculatedAt": _to_iso(metrics.calculated_at),
    }


def serialize_scenario(scenario: Scenario) -> Dict[str, Any]:
    return {
        "scenarioId": scenario.scenario_id,
        "input": {
            "description": scenario.description,
            "courseName": scenario.course_name,
            "courseId": scenario.course_id,
            "teachingTotalHours": scenario.teaching_total_hours,
            "teachingDays": scenario.teaching_days,
            "teachingTime": scenario.teaching_time,
            "labTotalHours": scenario.lab_total_hours,
            "labDays": scenario.lab_days,
            "labTime": scenario.lab_time,
            "ects": scenario.ects,
            "topicDifficulty": scenario.topic_difficulty,
            "prerequisites": scenario.prerequisites,
            "weeklyHomeworkHours": scenario.weekly_homework_hours,
            "totalWeeks": scenario.total_weeks,
            "attendanceMethod": scenario.attendance_method,
            "successRatePercent": _to_number(scenario.success_rate_percent),
            "averageGrade": _to_number(scenario.average_grade),
            "studentCount": scenario.student_count,
            "currentWeek": scenario.current_week,
            "createdAt": _to_iso(scenario.created_at),
            "updatedAt": _to_iso(scenario.updated_at),
        },
        "assignments": [serialize_assignment(a) for a in scenario.assignments],
        "stressMetrics": serialize_stress_metrics(scenario.current_stress_metrics),
    }


def serialize_simulation_set(simulation_set: SimulationSet) -> Dict[str, Any]:
    """Reshape a loaded simulation set into the external nested document."""
    return {
        "caseId": simulation_set.case_id,
        "name": simulation_set.name,
        "kind": simulation_set.kind,
        "description": simulation_set.description,
        "createdAt": _to_iso(simulation_set.created_at),
        "updatedAt": _to_iso(simulation_set.updated_at),
        "scenarios": [serialize_scenario(s) for s in simulation_set.scenarios],
    }


def load_simulation_set(db: Session, case_id: str) -> Optional[SimulationSet]:
    """Fetch a simulation set with scenarios, assignments and stress metrics eagerly loaded."""
    stmt = (
        select(SimulationSet)
        .where(SimulationSet.case_id == case_id)
        .options(
            selectinload(SimulationSet.scenarios).selectinload(Scenario.assignments),
            selectinload(SimulationSet.scenarios).selectinload(Scenario.stress_metrics),
        )
    )
    return db.execute(stmt).scalars().first()


def get_simulation_set(db: Session, case_id: str) -> Optional[Dict[str, Any]]:
    """
    Return the nested document for a simulation set.

    Args:
        db: Database session
        case_id: Identifier returned on create

    Returns:
        The camelCase document, or None when no set has this case id
    """
    simulation_set = load_simulation_set(db, case_id)
    if simulation_set is None:
        logger.debug(f"Simulation set not found: {case_id}")
        return None
    return serialize_simulation_set(simulation_set)
