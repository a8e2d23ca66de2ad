from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from app.schemas.conflict import ScheduleConflict
from app.schemas.grouping import CourseGroup
from app.schemas.timetable import CoursePayload, ScheduleItem, VenuePayload
from app.schemas.validation import ValidationResult

GenerationStatus = Literal["complete", "partial", "failed"]


class SchedulingPolicy(BaseModel):
    max_consecutive_hours: int = Field(default=2, alias="maxConsecutiveHours", ge=1, le=9)
    max_classes_per_day: int = Field(default=4, alias="maxClassesPerDay", ge=1, le=9)
    exam_overflow_tolerance: float = Field(default=0.10, alias="examOverflowTolerance", ge=0.0, le=0.5)
    lecturer_overload_threshold: int = Field(default=10, alias="lecturerOverloadThreshold", ge=1, le=100)
    lecturer_workload_warning_threshold: int = Field(
        default=6, alias="lecturerWorkloadWarningThreshold", ge=1, le=100
    )
    lecturer_redistribution_threshold: int = Field(
        default=8, alias="lecturerRedistributionThreshold", ge=1, le=100
    )
    fallback_warning_threshold: int = Field(default=3, alias="fallbackWarningThreshold", ge=0, le=100)
    venue_utilization_warning_ratio: float = Field(
        default=0.8, alias="venueUtilizationWarningRatio", gt=0.0, le=1.0
    )
    extended_venue_count: int = Field(default=3, alias="extendedVenueCount", ge=0, le=50)

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_relationships(self) -> "SchedulingPolicy":
        if self.lecturer_workload_warning_threshold > self.lecturer_overload_threshold:
            raise ValueError("lecturerWorkloadWarningThreshold cannot exceed lecturerOverloadThreshold")
        return self


class FallbackOptions(BaseModel):
    split_large_classes: bool = Field(default=True, alias="splitLargeClasses")
    add_extended_venues: bool = Field(default=True, alias="addExtendedVenues")
    use_alternative_time_slots: bool = Field(default=True, alias="useAlternativeTimeSlots")
    redistribute_lecturers: bool = Field(default=False, alias="redistributeLecturers")

    model_config = {"populate_by_name": True}


class FallbackResult(BaseModel):
    success: bool
    modified_courses: list[CoursePayload] = Field(default_factory=list, alias="modifiedCourses")
    suggested_venues: list[VenuePayload] = Field(default_factory=list, alias="suggestedVenues")
    fallbacks_applied: list[str] = Field(default_factory=list, alias="fallbacksApplied")

    model_config = {"populate_by_name": True}


class PlacementResult(BaseModel):
    schedule: list[ScheduleItem] = Field(default_factory=list)
    conflicts: list[ScheduleConflict] = Field(default_factory=list)


class GenerationSummary(BaseModel):
    total_courses: int = Field(alias="totalCourses", ge=0)
    scheduled_courses: int = Field(alias="scheduledCourses", ge=0)
    conflicted_courses: int = Field(alias="conflictedCourses", ge=0)
    success_rate: int = Field(alias="successRate", ge=0, le=100)

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_conservation(self) -> "GenerationSummary":
        if self.scheduled_courses + self.conflicted_courses != self.total_courses:
            raise ValueError("scheduledCourses + conflictedCourses must equal totalCourses")
        return self


class GenerateScheduleRequest(BaseModel):
    """Invocation shape of a generation run.

    ``courses`` / ``venues`` default to the persisted records when omitted.
    """

    courses: list[CoursePayload] | None = None
    venues: list[VenuePayload] | None = None
    course_groups: list[CourseGroup] | None = Field(default=None, alias="courseGroups")
    validation_result: ValidationResult | None = Field(default=None, alias="validationResult")
    enable_fallbacks: bool = Field(default=True, alias="enableFallbacks")
    fallback_options: FallbackOptions | None = Field(default=None, alias="fallbackOptions")
    policy: SchedulingPolicy | None = None
    use_remote_service: bool = Field(default=False, alias="useRemoteService")
    persist: bool = False
    publish: bool = False

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_publish(self) -> "GenerateScheduleRequest":
        if self.publish and not self.persist:
            raise ValueError("publish requires persist")
        return self


class ValidateScheduleRequest(BaseModel):
    courses: list[CoursePayload] | None = None
    venues: list[VenuePayload] | None = None
    policy: SchedulingPolicy | None = None


class GenerationResult(BaseModel):
    success: bool
    status: GenerationStatus
    message: str
    schedule: list[ScheduleItem] = Field(default_factory=list)
    conflicts: list[ScheduleConflict] = Field(default_factory=list)
    summary: GenerationSummary
    validation_result: ValidationResult = Field(alias="validationResult")
    fallbacks_applied: list[str] | None = Field(default=None, alias="fallbacksApplied")
    course_groups: list[CourseGroup] = Field(default_factory=list, alias="courseGroups")
    pre_validation_passed: bool = Field(alias="preValidationPassed")
    generation_time_ms: int = Field(default=0, alias="generationTimeMs", ge=0)

    model_config = {"populate_by_name": True}


class PublishScheduleRequest(BaseModel):
    published: bool = True


class PublishScheduleResponse(BaseModel):
    published: bool
    updated: int
