from __future__ import annotations

import logging
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Sequence

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.exceptions import AppError, NoVenuesAvailableError
from app.schemas.conflict import BLOCKING_SEVERITIES, ScheduleConflict
from app.schemas.generator import (
    FallbackOptions,
    GenerateScheduleRequest,
    GenerationResult,
    PlacementResult,
    SchedulingPolicy,
)
from app.schemas.grouping import CourseGroup
from app.schemas.timetable import CoursePayload, VenuePayload
from app.schemas.validation import ValidationResult
from app.services import schedule_store
from app.services.conflict_service import ConflictService
from app.services.conformance import conform_schedule
from app.services.course_grouping import apply_grouping, identify_shared_courses
from app.services.course_rules import count_academic_levels, count_active_lecturers
from app.services.fallback import apply_fallback_strategies
from app.services.placement import generate_schedule_from_courses
from app.services.pre_validation import perform_pre_generation_validation
from app.services.remote_generator import RemoteScheduleClient
from app.services.reporting import build_summary, classify_outcome, validation_errors_to_conflicts

logger = logging.getLogger(__name__)


def default_policy(settings: Settings | None = None) -> SchedulingPolicy:
    settings = settings or get_settings()
    return SchedulingPolicy(
        max_consecutive_hours=settings.max_consecutive_hours,
        max_classes_per_day=settings.max_classes_per_day,
        exam_overflow_tolerance=settings.exam_overflow_tolerance,
        lecturer_overload_threshold=settings.lecturer_overload_threshold,
        lecturer_workload_warning_threshold=settings.lecturer_workload_warning_threshold,
        lecturer_redistribution_threshold=settings.lecturer_redistribution_threshold,
        fallback_warning_threshold=settings.fallback_warning_threshold,
        venue_utilization_warning_ratio=settings.venue_utilization_warning_ratio,
        extended_venue_count=settings.extended_venue_count,
    )


def _elapsed_ms(started: float) -> int:
    return max(0, int((perf_counter() - started) * 1000))


def failed_result(
    courses: Sequence[CoursePayload],
    message: str,
    *,
    started: float | None = None,
) -> GenerationResult:
    """Result for a run terminated by an infrastructure failure."""
    conflict = ScheduleConflict(
        course=courses[0] if courses else None,
        reason=message,
        conflict_type="system-error",
        severity="critical",
        suggestion="Check the scheduling services and try again",
    )
    return GenerationResult(
        success=False,
        status="failed",
        message=f"Schedule generation failed: {message}",
        schedule=[],
        conflicts=[conflict],
        summary=build_summary(len(courses), 0),
        validation_result=ValidationResult(is_valid=False),
        fallbacks_applied=None,
        course_groups=[],
        pre_validation_passed=False,
        generation_time_ms=_elapsed_ms(started) if started is not None else 0,
    )


def _remote_conflicts(raw_conflicts: Sequence[Any]) -> list[ScheduleConflict]:
    conflicts: list[ScheduleConflict] = []
    for raw in raw_conflicts:
        try:
            conflicts.append(ScheduleConflict.model_validate(raw))
        except ValidationError:
            logger.warning("Rejected malformed conflict record from remote generation service")
            conflicts.append(
                ScheduleConflict(
                    course=None,
                    reason="Malformed conflict record returned by the remote generation service",
                    conflict_type="system-error",
                    severity="medium",
                )
            )
    return conflicts


@dataclass
class ScheduleGenerator:
    """One generation run: validate, group, place, repair once, report."""

    policy: SchedulingPolicy
    fallback_options: FallbackOptions = field(default_factory=FallbackOptions)
    remote_client: RemoteScheduleClient | None = None

    def place(
        self,
        courses: Sequence[CoursePayload],
        venues: Sequence[VenuePayload],
        course_groups: Sequence[CourseGroup] | None = None,
        validation: ValidationResult | None = None,
    ) -> PlacementResult:
        if self.remote_client is None:
            placement = generate_schedule_from_courses(courses, venues, self.policy)
            schedule, rejected = conform_schedule(placement.schedule, courses, venues)
            return PlacementResult(schedule=schedule, conflicts=[*placement.conflicts, *rejected])

        body = self.remote_client.generate(courses, venues, course_groups, validation)
        schedule, rejected = conform_schedule(body.get("schedule") or [], courses, venues)
        schedule, double_booked = ConflictService(schedule).enforce_exclusivity()
        conflicts = [*_remote_conflicts(body.get("conflicts") or []), *rejected, *double_booked]

        accounted = {item.id for item in schedule}
        accounted.update(conflict.course.id for conflict in conflicts if conflict.course is not None)
        for course in courses:
            if course.id in accounted:
                continue
            conflicts.append(
                ScheduleConflict(
                    course=course,
                    reason=f"Course {course.code} was not returned by the remote generation service",
                    conflict_type="system-error",
                    severity="high",
                    suggestion="Regenerate the schedule or place this course manually",
                )
            )
        return PlacementResult(schedule=schedule, conflicts=conflicts)

    def run(
        self,
        courses: Sequence[CoursePayload],
        venues: Sequence[VenuePayload],
        *,
        course_groups: Sequence[CourseGroup] | None = None,
        validation_result: ValidationResult | None = None,
        enable_fallbacks: bool = True,
    ) -> GenerationResult:
        started = perf_counter()
        try:
            return self._run(
                courses,
                venues,
                course_groups=course_groups,
                validation_result=validation_result,
                enable_fallbacks=enable_fallbacks,
                started=started,
            )
        except AppError as exc:
            logger.exception("Schedule generation aborted: %s", exc.message)
            return failed_result(courses, exc.message, started=started)

    def _run(
        self,
        courses: Sequence[CoursePayload],
        venues: Sequence[VenuePayload],
        *,
        course_groups: Sequence[CourseGroup] | None,
        validation_result: ValidationResult | None,
        enable_fallbacks: bool,
        started: float,
    ) -> GenerationResult:
        if not venues:
            raise NoVenuesAvailableError()
        logger.info(
            "Generation started | courses=%s lecturers=%s levels=%s venues=%s",
            len(courses),
            count_active_lecturers(courses),
            count_academic_levels(courses),
            len(venues),
        )

        validation = validation_result or perform_pre_generation_validation(courses, venues, self.policy)
        blocking = [error for error in validation.errors if error.severity in BLOCKING_SEVERITIES]

        if blocking and not enable_fallbacks:
            logger.info("Generation blocked by %s validation errors with fallbacks disabled", len(blocking))
            return GenerationResult(
                success=False,
                status="failed",
                message=(
                    f"Schedule generation blocked by {len(blocking)} critical or high validation errors; "
                    "fix the input or enable fallbacks"
                ),
                schedule=[],
                conflicts=validation_errors_to_conflicts(blocking),
                summary=build_summary(len(courses), 0),
                validation_result=validation,
                fallbacks_applied=None,
                course_groups=list(course_groups or []),
                pre_validation_passed=False,
                generation_time_ms=_elapsed_ms(started),
            )

        groups = list(course_groups) if course_groups is not None else identify_shared_courses(courses)
        working = apply_grouping(courses, groups)
        placement = self.place(working, venues, groups, validation)
        placed_units = len(working)

        fallbacks_applied: list[str] | None = None
        needs_fallback = (
            bool(blocking)
            or len(validation.warnings) > self.policy.fallback_warning_threshold
            or bool(placement.conflicts)
        )
        if enable_fallbacks and needs_fallback:
            fallback = apply_fallback_strategies(
                working,
                venues,
                validation.errors,
                self.fallback_options,
                self.policy,
                placement.conflicts,
            )
            if fallback.success:
                fallbacks_applied = fallback.fallbacks_applied
                placement = self.place(fallback.modified_courses, fallback.suggested_venues, groups, validation)
                placed_units = len(fallback.modified_courses)

        success, status, message = classify_outcome(placement.schedule, placement.conflicts)
        result = GenerationResult(
            success=success,
            status=status,
            message=message,
            schedule=placement.schedule,
            conflicts=placement.conflicts,
            summary=build_summary(placed_units, len(placement.schedule)),
            validation_result=validation,
            fallbacks_applied=fallbacks_applied,
            course_groups=groups,
            pre_validation_passed=validation.is_valid,
            generation_time_ms=_elapsed_ms(started),
        )
        logger.info(
            "Generation finished | status=%s scheduled=%s/%s conflicts=%s fallbacks=%s runtime_ms=%s",
            result.status,
            result.summary.scheduled_courses,
            result.summary.total_courses,
            len(result.conflicts),
            len(fallbacks_applied or []),
            result.generation_time_ms,
        )
        return result


def generate_enhanced_schedule(
    courses: Sequence[CoursePayload],
    venues: Sequence[VenuePayload],
    *,
    course_groups: Sequence[CourseGroup] | None = None,
    validation_result: ValidationResult | None = None,
    enable_fallbacks: bool = True,
    fallback_options: FallbackOptions | None = None,
    policy: SchedulingPolicy | None = None,
    remote_client: RemoteScheduleClient | None = None,
) -> GenerationResult:
    generator = ScheduleGenerator(
        policy=policy or default_policy(),
        fallback_options=fallback_options or FallbackOptions(),
        remote_client=remote_client,
    )
    return generator.run(
        courses,
        venues,
        course_groups=course_groups,
        validation_result=validation_result,
        enable_fallbacks=enable_fallbacks,
    )


def generate_for_request(
    db: Session,
    payload: GenerateScheduleRequest,
    *,
    remote_client: RemoteScheduleClient | None = None,
) -> GenerationResult:
    """Run a generation for an HTTP request, reading omitted inputs from the store."""
    started = perf_counter()
    courses: list[CoursePayload] = list(payload.courses or [])
    try:
        if payload.courses is None:
            courses = schedule_store.fetch_courses(db)
        venues = payload.venues if payload.venues is not None else schedule_store.fetch_venues(db)
        if payload.use_remote_service and remote_client is None:
            remote_client = RemoteScheduleClient.from_settings()
    except AppError as exc:
        logger.exception("Could not prepare generation inputs: %s", exc.message)
        return failed_result(courses, exc.message, started=started)

    result = generate_enhanced_schedule(
        courses,
        venues,
        course_groups=payload.course_groups,
        validation_result=payload.validation_result,
        enable_fallbacks=payload.enable_fallbacks,
        fallback_options=payload.fallback_options,
        policy=payload.policy,
        remote_client=remote_client,
    )

    if payload.persist and result.schedule:
        schedule_store.save_schedule(db, result.schedule, published=payload.publish)
    return result
