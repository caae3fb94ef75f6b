"""
Tests for the simulation store write and read paths.

Exercises the service functions directly against an in-memory session.
"""

import uuid
import pytest
from decimal import Decimal
from sqlalchemy import event
from sqlalchemy.orm import Session

from whatif.models.simulation import SimulationSet, Scenario, Assignment, StressMetrics
from whatif.schemas import SimulationSetCreate
from whatif.services import simulation_store
from whatif.services.simulation_store import create_simulation_set, get_simulation_set


class TestCreateSimulationSet:
    """Test suite for the write path."""

    def test_generates_uuid_case_id(self, db_session: Session, minimal_payload: dict):
        """Test the case id is a server-generated UUID."""
        case_id = create_simulation_set(db_session, SimulationSetCreate(**minimal_payload))

        assert str(uuid.UUID(case_id)) == case_id
        assert db_session.get(SimulationSet, case_id) is not None

    def test_client_case_id_is_ignored(self, db_session: Session, minimal_payload: dict):
        """Test a caseId in the body never becomes the primary key."""
        minimal_payload["caseId"] = "client-chosen"
        case_id = create_simulation_set(db_session, SimulationSetCreate(**minimal_payload))

        assert case_id != "client-chosen"
        assert db_session.get(SimulationSet, "client-chosen") is None

    def test_persists_nested_rows(self, db_session: Session, full_payload: dict):
        """Test every scenario, assignment and stress metrics row is written."""
        case_id = create_simulation_set(db_session, SimulationSetCreate(**full_payload))

        assert db_session.query(Scenario).filter(Scenario.case_id == case_id).count() == 2
        assert db_session.query(Assignment).filter(Assignment.case_id == case_id).count() == 3
        assert db_session.query(StressMetrics).filter(StressMetrics.case_id == case_id).count() == 1

        scenario = db_session.get(Scenario, (case_id, 2))
        assert scenario.course_name == "MATH201"
        assert scenario.lab_days == ["Wednesday", "Friday"]
        assert scenario.success_rate_percent == Decimal("72.55")

    def test_caller_scenario_ids_used_verbatim(self, db_session: Session, full_payload: dict):
        """Test scenarioId values form the second half of the composite key."""
        full_payload["scenarios"][0]["scenarioId"] = 17
        full_payload["scenarios"][1]["scenarioId"] = 42
        case_id = create_simulation_set(db_session, SimulationSetCreate(**full_payload))

        ids = sorted(s.scenario_id for s in db_session.query(Scenario).filter(Scenario.case_id == case_id))
        assert ids == [17, 42]

    def test_each_create_gets_a_new_case_id(self, db_session: Session, minimal_payload: dict):
        """Test resubmitting the same payload creates a separate set."""
        first = create_simulation_set(db_session, SimulationSetCreate(**minimal_payload))
        second = create_simulation_set(db_session, SimulationSetCreate(**minimal_payload))

        assert first != second
        assert db_session.query(SimulationSet).count() == 2

    def test_failure_mid_transaction_leaves_no_rows(self, db_session: Session, full_payload: dict):
        """Test a failure while inserting children rolls back the parent too."""
        def fail_insert(mapper, connection, target):
            raise RuntimeError("stress metrics insert failed")

        event.listen(StressMetrics, "before_insert", fail_insert)
        try:
            with pytest.raises(RuntimeError):
                create_simulation_set(db_session, SimulationSetCreate(**full_payload))
        finally:
            event.remove(StressMetrics, "before_insert", fail_insert)

        assert db_session.query(SimulationSet).count() == 0
        assert db_session.query(Scenario).count() == 0
        assert db_session.query(Assignment).count() == 0
        assert db_session.query(StressMetrics).count() == 0

    def test_case_id_collision_rolls_back(self, db_session: Session, minimal_payload: dict, monkeypatch):
        """Test a key collision in the store fails the whole create."""
        monkeypatch.setattr(simulation_store, "generate_case_id", lambda: "fixed-case-id")
        create_simulation_set(db_session, SimulationSetCreate(**minimal_payload))
        db_session.expunge_all()

        minimal_payload["name"] = "Second attempt"
        with pytest.raises(Exception):
            create_simulation_set(db_session, SimulationSetCreate(**minimal_payload))

        assert db_session.query(SimulationSet).count() == 1
        assert db_session.query(SimulationSet).one().name == "S1"
        assert db_session.query(Assignment).count() == 1


class TestGetSimulationSet:
    """Test suite for the read path."""

    def test_unknown_case_id_returns_none(self, db_session: Session):
        """Test a missing set yields no document."""
        assert get_simulation_set(db_session, str(uuid.uuid4())) is None

    def test_document_shape(self, db_session: Session, full_payload: dict):
        """Test the nested document uses the camelCase contract."""
        case_id = create_simulation_set(db_session, SimulationSetCreate(**full_payload))
        db_session.expunge_all()

        doc = get_simulation_set(db_session, case_id)

        assert doc["caseId"] == case_id
        assert doc["name"] == "Spring planning"
        assert doc["kind"] == "semester"
        assert doc["description"] == "What if the lab moves to Friday?"
        assert doc["createdAt"] is not None
        assert doc["updatedAt"] is not None
        assert [s["scenarioId"] for s in doc["scenarios"]] == [1, 2]

        first = doc["scenarios"][0]
        assert first["input"]["courseName"] == "CS101"
        assert first["input"]["teachingDays"] == ["Monday"]
        assert first["input"]["successRatePercent"] == 80.0
        assert first["input"]["averageGrade"] == 3.5
        assert first["input"]["createdAt"] is not None
        assert [a["assignmentNumber"] for a in first["assignments"]] == [1, 2]
        assert first["assignments"][0]["caseId"] == case_id
        assert first["assignments"][0]["scenarioId"] == 1
        assert first["assignments"][1]["hoursPerWeek"] == 4

        metrics = first["stressMetrics"]
        assert metrics["currentWeekAverage"] == 3.25
        assert metrics["currentWeekMaximum"] == 5.5
        assert metrics["predictedNextWeekAverage"] == 4.1
        assert metrics["predictedNextWeekMaximum"] == 7.75
        assert metrics["calculatedAt"] is not None

    def test_decimals_emitted_as_numbers(self, db_session: Session, full_payload: dict):
        """Test fixed-point columns leave the read path as floats."""
        case_id = create_simulation_set(db_session, SimulationSetCreate(**full_payload))

        doc = get_simulation_set(db_session, case_id)
        second = doc["scenarios"][1]["input"]

        assert isinstance(second["successRatePercent"], float)
        assert second["successRatePercent"] == 72.55
        assert second["averageGrade"] == 2.87

    def test_missing_stress_metrics_is_null(self, db_session: Session, full_payload: dict):
        """Test a scenario without stress metrics reports None."""
        case_id = create_simulation_set(db_session, SimulationSetCreate(**full_payload))

        doc = get_simulation_set(db_session, case_id)

        assert doc["scenarios"][1]["stressMetrics"] is None

    def test_earliest_stress_metrics_surfaced(self, db_session: Session, full_payload: dict):
        """Test only the earliest calculated snapshot is returned when several exist."""
        from datetime import timedelta
        from whatif.models.simulation import utcnow

        case_id = create_simulation_set(db_session, SimulationSetCreate(**full_payload))
        original = db_session.query(StressMetrics).filter(StressMetrics.case_id == case_id).one()
        db_session.add(StressMetrics(
            case_id=case_id,
            scenario_id=1,
            current_week_average=Decimal("9.99"),
            current_week_maximum=Decimal("9.99"),
            predicted_next_week_average=Decimal("9.99"),
            predicted_next_week_maximum=Decimal("9.99"),
            calculated_at=original.calculated_at - timedelta(days=1),
        ))
        db_session.add(StressMetrics(
            case_id=case_id,
            scenario_id=1,
            current_week_average=Decimal("1.11"),
            current_week_maximum=Decimal("1.11"),
            predicted_next_week_average=Decimal("1.11"),
            predicted_next_week_maximum=Decimal("1.11"),
            calculated_at=utcnow() + timedelta(days=1),
        ))
        db_session.commit()
        db_session.expunge_all()

        doc = get_simulation_set(db_session, case_id)

        assert doc["scenarios"][0]["stressMetrics"]["currentWeekAverage"] == 9.99

    def test_set_without_scenarios(self, db_session: Session):
        """Test an empty set round-trips with an empty scenario list."""
        case_id = create_simulation_set(db_session, SimulationSetCreate(name="Empty"))

        doc = get_simulation_set(db_session, case_id)

        assert doc["scenarios"] == []
        assert doc["kind"] is None
        assert doc["description"] is None
