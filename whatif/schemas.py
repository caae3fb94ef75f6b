"""Request models for the simulations API.

Field names follow the camelCase JSON contract used by the frontend.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

# numeric(precision, 2) columns behind the decimal fields
COURSE_PRECISION = {"successRatePercent": 5, "averageGrade": 3}
STRESS_PRECISION = 4


def to_fixed_point(value, precision: int, scale: int = 2):
    """
    Round a submitted number to `scale` fractional digits, as a numeric column does.

    The rounded value must still fit `precision` total digits. Values that are
    not numbers are passed through for pydantic to reject.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        return value
    try:
        quantized = Decimal(str(value)).quantize(Decimal(1).scaleb(-scale), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return value
    if not quantized.is_finite():
        return value
    limit = Decimal(10) ** (precision - scale)
    if abs(quantized) >= limit:
        raise ValueError(f"must be less than {limit} in absolute value")
    return quantized


class CourseInput(BaseModel):
    """Course metadata and current status of one scenario."""
    description: Optional[str] = None
    courseName: str
    courseId: Optional[str] = None
    teachingTotalHours: int
    teachingDays: Optional[List[str]] = None
    teachingTime: Optional[str] = None
    labTotalHours: int
    labDays: Optional[List[str]] = None
    labTime: Optional[str] = None
    ects: int
    topicDifficulty: int
    prerequisites: bool
    weeklyHomeworkHours: int
    totalWeeks: int
    attendanceMethod: str
    successRatePercent: Decimal = Field(max_digits=5, decimal_places=2)
    averageGrade: Decimal = Field(max_digits=3, decimal_places=2)
    studentCount: int
    currentWeek: int

    @field_validator("successRatePercent", "averageGrade", mode="before")
    @classmethod
    def round_fraction(cls, value, info: ValidationInfo):
        return to_fixed_point(value, COURSE_PRECISION[info.field_name])


class AssignmentInput(BaseModel):
    assignmentNumber: int
    startWeek: Optional[int] = None
    endWeek: int
    hoursPerWeek: Optional[int] = None


class StressMetricsInput(BaseModel):
    currentWeekAverage: Decimal = Field(max_digits=4, decimal_places=2)
    currentWeekMaximum: Decimal = Field(max_digits=4, decimal_places=2)
    predictedNextWeekAverage: Decimal = Field(max_digits=4, decimal_places=2)
    predictedNextWeekMaximum: Decimal = Field(max_digits=4, decimal_places=2)

    @field_validator(
        "currentWeekAverage", "currentWeekMaximum",
        "predictedNextWeekAverage", "predictedNextWeekMaximum",
        mode="before",
    )
    @classmethod
    def round_fraction(cls, value):
        return to_fixed_point(value, STRESS_PRECISION)


class ScenarioInput(BaseModel):
    """A scenario as submitted by the builder. scenarioId is caller-assigned."""
    scenarioId: int
    input: CourseInput
    assignments: List[AssignmentInput] = []
    stressMetrics: Optional[StressMetricsInput] = None

    @model_validator(mode="after")
    def check_unique_assignment_numbers(self):
        numbers = [a.assignmentNumber for a in self.assignments]
        if len(numbers) != len(set(numbers)):
            raise ValueError(
                f"Duplicate assignmentNumber in scenario {self.scenarioId}"
            )
        return self


class SimulationSetCreate(BaseModel):
    """Request model for creating a simulation set. The caseId is generated server-side."""
    name: str
    kind: Optional[str] = None
    description: Optional[str] = None
    scenarios: List[ScenarioInput] = []

    @model_validator(mode="after")
    def check_unique_scenario_ids(self):
        ids = [s.scenarioId for s in self.scenarios]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate scenarioId in simulation set")
        return self
