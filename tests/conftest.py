"""
Pytest fixtures and configuration for the What-If backend tests.

This module provides common fixtures used across all test modules,
including database setup, test client, and sample payloads.
"""

import os
import tempfile

# Keep the application away from the development database and log folder
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "whatif-test-logs"))

import copy
import pytest
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from whatif.main import app
from whatif.db import get_db, enable_sqlite_foreign_keys
from whatif.models import Base


# Create in-memory SQLite database for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


SAMPLE_SCENARIO_INPUT = {
    "courseName": "CS101",
    "teachingTotalHours": 40,
    "teachingDays": ["Monday"],
    "teachingTime": "9-11",
    "labTotalHours": 20,
    "labDays": ["Tuesday"],
    "labTime": "14-16",
    "ects": 5,
    "topicDifficulty": 3,
    "prerequisites": False,
    "weeklyHomeworkHours": 3,
    "totalWeeks": 10,
    "attendanceMethod": "Online",
    "successRatePercent": 80.0,
    "averageGrade": 3.5,
    "studentCount": 30,
    "currentWeek": 1,
}


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with overridden database dependency.
    """
    app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def minimal_payload() -> dict:
    """
    The single-scenario create request: one assignment, no stress metrics.
    """
    return {
        "name": "S1",
        "scenarios": [{
            "scenarioId": 1,
            "input": copy.deepcopy(SAMPLE_SCENARIO_INPUT),
            "assignments": [{"assignmentNumber": 1, "endWeek": 3, "hoursPerWeek": 2}],
        }],
    }


@pytest.fixture
def full_payload() -> dict:
    """
    A two-scenario create request with assignments and stress metrics.
    """
    second_input = copy.deepcopy(SAMPLE_SCENARIO_INPUT)
    second_input.update({
        "description": "Heavier lab load",
        "courseName": "MATH201",
        "courseId": "M-201",
        "labTotalHours": 30,
        "labDays": ["Wednesday", "Friday"],
        "successRatePercent": 72.55,
        "averageGrade": 2.87,
        "prerequisites": True,
    })
    return {
        "name": "Spring planning",
        "kind": "semester",
        "description": "What if the lab moves to Friday?",
        "scenarios": [
            {
                "scenarioId": 1,
                "input": copy.deepcopy(SAMPLE_SCENARIO_INPUT),
                "assignments": [
                    {"assignmentNumber": 1, "startWeek": 1, "endWeek": 3, "hoursPerWeek": 2},
                    {"assignmentNumber": 2, "startWeek": 4, "endWeek": 6, "hoursPerWeek": 4},
                ],
                "stressMetrics": {
                    "currentWeekAverage": 3.25,
                    "currentWeekMaximum": 5.5,
                    "predictedNextWeekAverage": 4.1,
                    "predictedNextWeekMaximum": 7.75,
                },
            },
            {
                "scenarioId": 2,
                "input": second_input,
                "assignments": [
                    {"assignmentNumber": 1, "endWeek": 8},
                ],
            },
        ],
    }
