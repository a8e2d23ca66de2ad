from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.conflict import ConflictType, Severity
from app.schemas.timetable import VenuePayload

ExamSessionName = Literal["Morning", "Midday", "Afternoon"]


class ExamCoursePayload(BaseModel):
    id: str | None = Field(default=None, max_length=36)
    course_code: str = Field(alias="courseCode", min_length=1, max_length=20)
    course_title: str = Field(alias="courseTitle", min_length=1, max_length=200)
    department: str = Field(min_length=1, max_length=200)
    college: str = Field(default="", max_length=200)
    level: str = Field(default="", max_length=20)
    student_count: int = Field(alias="studentCount", ge=0, le=20_000)

    model_config = {"populate_by_name": True, "from_attributes": True}

    @field_validator("course_code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()


class ExamCourseReplaceRequest(BaseModel):
    courses: list[ExamCoursePayload] = Field(default_factory=list, max_length=5000)


class ExamScheduleItem(BaseModel):
    exam_course_id: str | None = Field(default=None, alias="examCourseId")
    course_code: str = Field(alias="courseCode")
    course_title: str = Field(alias="courseTitle")
    department: str
    college: str = ""
    level: str = ""
    student_count: int = Field(alias="studentCount", ge=0)
    shared_departments: list[str] = Field(default_factory=list, alias="sharedDepartments")
    day: date
    session: ExamSessionName
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    venue_name: str = Field(alias="venueName")
    venue_capacity: int | None = Field(default=None, alias="venueCapacity")
    published: bool = False

    model_config = {"populate_by_name": True}


class ExamConflict(BaseModel):
    course_code: str = Field(alias="courseCode")
    course_title: str = Field(alias="courseTitle")
    student_count: int = Field(alias="studentCount")
    reason: str
    conflict_type: ConflictType = Field(alias="conflictType")
    severity: Severity
    suggestion: str | None = None

    model_config = {"populate_by_name": True}


class ExamGenerationSummary(BaseModel):
    total_courses: int = Field(alias="totalCourses", ge=0)
    scheduled_courses: int = Field(alias="scheduledCourses", ge=0)
    unscheduled_courses: int = Field(alias="unscheduledCourses", ge=0)
    exam_days: int = Field(alias="examDays", ge=0)
    days_used: int = Field(alias="daysUsed", ge=0)

    model_config = {"populate_by_name": True}


class ExamGenerationResult(BaseModel):
    success: bool
    message: str
    schedule: list[ExamScheduleItem] = Field(default_factory=list)
    conflicts: list[ExamConflict] = Field(default_factory=list)
    summary: ExamGenerationSummary


class GenerateExamScheduleRequest(BaseModel):
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    courses: list[ExamCoursePayload] | None = None
    venues: list[VenuePayload] | None = None
    sessions: list[ExamSessionName] | None = None
    overflow_tolerance: float | None = Field(default=None, alias="overflowTolerance", ge=0.0, le=0.5)
    persist: bool = False
    publish: bool = False

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_range(self) -> "GenerateExamScheduleRequest":
        if self.start_date >= self.end_date:
            raise ValueError("endDate must be after startDate")
        if self.publish and not self.persist:
            raise ValueError("publish requires persist")
        return self
