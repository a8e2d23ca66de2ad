from typing import Literal

from pydantic import BaseModel, Field

from app.schemas.conflict import Severity
from app.schemas.timetable import CoursePayload

ValidationErrorType = Literal["venue_capacity", "lecturer_overload", "missing_data", "cross_level_conflict"]
ValidationWarningType = Literal["lecturer_workload", "venue_utilization", "time_distribution"]


class ValidationErrorEntry(BaseModel):
    type: ValidationErrorType
    severity: Severity
    message: str
    affected_courses: list[CoursePayload] = Field(default_factory=list, alias="affectedCourses")
    suggestion: str

    model_config = {"populate_by_name": True}


class ValidationWarningEntry(BaseModel):
    type: ValidationWarningType
    message: str
    affected_courses: list[CoursePayload] = Field(default_factory=list, alias="affectedCourses")
    suggestion: str

    model_config = {"populate_by_name": True}


class ValidationResult(BaseModel):
    is_valid: bool = Field(alias="isValid")
    errors: list[ValidationErrorEntry] = Field(default_factory=list)
    warnings: list[ValidationWarningEntry] = Field(default_factory=list)

    model_config = {"populate_by_name": True}
