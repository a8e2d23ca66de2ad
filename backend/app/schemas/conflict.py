from typing import Literal, Optional, List

from pydantic import BaseModel, Field

from app.schemas.timetable import CoursePayload, ScheduleItem

ConflictType = Literal["lecturer", "venue", "cross-departmental", "resource", "system-error"]
Severity = Literal["critical", "high", "medium", "low"]

SEVERITY_RANK = {"critical": 0, "high": 1, "medium": 2, "low": 3}
BLOCKING_SEVERITIES = frozenset({"critical", "high"})


class ScheduleConflict(BaseModel):
    course: Optional[CoursePayload] = None
    reason: str
    conflict_type: ConflictType = Field(alias="conflictType")
    severity: Severity
    suggestion: Optional[str] = None

    model_config = {"populate_by_name": True}


class ConflictGroup(BaseModel):
    conflict_type: ConflictType = Field(alias="conflictType")
    title: str
    highest_severity: Severity = Field(alias="highestSeverity")
    conflicts: List[ScheduleConflict]
    solution_steps: List[str] = Field(default_factory=list, alias="solutionSteps")

    model_config = {"populate_by_name": True}


class ConflictReport(BaseModel):
    total_conflicts: int = Field(alias="totalConflicts")
    groups: List[ConflictGroup]
    validation_errors_by_type: dict[str, int] = Field(default_factory=dict, alias="validationErrorsByType")
    warnings_by_type: dict[str, int] = Field(default_factory=dict, alias="warningsByType")
    fallbacks_applied: List[str] = Field(default_factory=list, alias="fallbacksApplied")

    model_config = {"populate_by_name": True}


class ScheduleAuditRequest(BaseModel):
    schedule: List[ScheduleItem] = Field(default_factory=list, max_length=5000)


class ScheduleAuditResponse(BaseModel):
    conflicts: List[ScheduleConflict]
    report: ConflictReport
    affected_course_ids: List[str] = Field(default_factory=list, alias="affectedCourseIds")

    model_config = {"populate_by_name": True}
