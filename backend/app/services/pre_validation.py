from __future__ import annotations

import logging
from collections import defaultdict
from typing import Sequence

from app.schemas.conflict import BLOCKING_SEVERITIES
from app.schemas.generator import SchedulingPolicy
from app.schemas.timetable import CoursePayload, VenuePayload
from app.schemas.validation import ValidationErrorEntry, ValidationResult, ValidationWarningEntry
from app.services.course_grouping import identify_shared_courses
from app.services.course_rules import course_level, missing_fields
from app.services.venue_allocator import max_venue_capacity, suggest_split

logger = logging.getLogger(__name__)


def _courses_by_lecturer(courses: Sequence[CoursePayload]) -> dict[str, list[CoursePayload]]:
    by_lecturer: dict[str, list[CoursePayload]] = defaultdict(list)
    for course in courses:
        if course.lecturer:
            by_lecturer[course.lecturer].append(course)
    return by_lecturer


def validate_venue_capacity(
    courses: Sequence[CoursePayload],
    venues: Sequence[VenuePayload],
) -> list[ValidationErrorEntry]:
    errors: list[ValidationErrorEntry] = []
    max_capacity = max_venue_capacity(venues)
    for course in courses:
        if course.class_size <= max_capacity:
            continue
        split = suggest_split(course, venues)
        if split is None:
            suggestion = "Add venues before scheduling"
        else:
            suggestion = f"Split into {split.groups} sections of {split.suggested_size}"
        errors.append(
            ValidationErrorEntry(
                type="venue_capacity",
                severity="critical",
                message=(
                    f"Course {course.code} has {course.class_size} students "
                    f"but largest venue only holds {max_capacity}"
                ),
                affected_courses=[course],
                suggestion=suggestion,
            )
        )
    return errors


def validate_lecturer_workload(
    courses: Sequence[CoursePayload],
    policy: SchedulingPolicy,
) -> list[ValidationErrorEntry]:
    errors: list[ValidationErrorEntry] = []
    for lecturer, assigned in _courses_by_lecturer(courses).items():
        if len(assigned) > policy.lecturer_overload_threshold:
            errors.append(
                ValidationErrorEntry(
                    type="lecturer_overload",
                    severity="high",
                    message=(
                        f"Lecturer {lecturer} is assigned {len(assigned)} courses, "
                        "which exceeds recommended maximum"
                    ),
                    affected_courses=assigned,
                    suggestion="Redistribute some courses to other lecturers or adjust the schedule",
                )
            )
    return errors


def validate_missing_data(courses: Sequence[CoursePayload]) -> list[ValidationErrorEntry]:
    errors: list[ValidationErrorEntry] = []
    for course in courses:
        missing = missing_fields(course)
        if not missing:
            continue
        errors.append(
            ValidationErrorEntry(
                type="missing_data",
                severity="critical",
                message=f"Course {course.code or 'Unknown'} is missing: {', '.join(missing)}",
                affected_courses=[course],
                suggestion="Complete all required course information before scheduling",
            )
        )
    return errors


def validate_cross_level_conflicts(courses: Sequence[CoursePayload]) -> list[ValidationErrorEntry]:
    errors: list[ValidationErrorEntry] = []
    for group in identify_shared_courses(courses):
        if not group.is_shared_course:
            continue
        levels: list[int] = []
        for course in group.courses:
            level = course_level(course)
            if level is not None and level not in levels:
                levels.append(level)
        if len(levels) <= 1:
            continue
        errors.append(
            ValidationErrorEntry(
                type="cross_level_conflict",
                severity="medium",
                message=(
                    f"Shared course {group.course_code} spans multiple levels: "
                    f"{', '.join(str(level) for level in levels)}"
                ),
                affected_courses=group.courses,
                suggestion="Consider grouping these courses in the same time slot to accommodate carryover students",
            )
        )
    return errors


def lecturer_workload_warnings(
    courses: Sequence[CoursePayload],
    policy: SchedulingPolicy,
) -> list[ValidationWarningEntry]:
    warnings: list[ValidationWarningEntry] = []
    low = policy.lecturer_workload_warning_threshold
    high = policy.lecturer_overload_threshold
    for lecturer, assigned in _courses_by_lecturer(courses).items():
        if low <= len(assigned) <= high:
            warnings.append(
                ValidationWarningEntry(
                    type="lecturer_workload",
                    message=f"Lecturer {lecturer} has {len(assigned)} courses - consider workload balance",
                    affected_courses=assigned,
                    suggestion="Monitor lecturer workload and consider redistributing if needed",
                )
            )
    return warnings


def venue_utilization_warnings(
    courses: Sequence[CoursePayload],
    venues: Sequence[VenuePayload],
    policy: SchedulingPolicy,
) -> list[ValidationWarningEntry]:
    total_students = sum(course.class_size for course in courses)
    total_capacity = sum(venue.capacity for venue in venues)
    if total_students <= total_capacity * policy.venue_utilization_warning_ratio:
        return []
    return [
        ValidationWarningEntry(
            type="venue_utilization",
            message=f"High venue utilization: {total_students} students across {total_capacity} total capacity",
            affected_courses=list(courses),
            suggestion="Consider adding more venues or adjusting class sizes",
        )
    ]


def perform_pre_generation_validation(
    courses: Sequence[CoursePayload],
    venues: Sequence[VenuePayload],
    policy: SchedulingPolicy | None = None,
) -> ValidationResult:
    """Static checks over the whole course set before any placement.

    Pure and diagnostic: inputs are never modified. The result is valid when no
    error is critical or high.
    """
    policy = policy or SchedulingPolicy()
    errors = [
        *validate_venue_capacity(courses, venues),
        *validate_lecturer_workload(courses, policy),
        *validate_missing_data(courses),
        *validate_cross_level_conflicts(courses),
    ]
    warnings = [
        *lecturer_workload_warnings(courses, policy),
        *venue_utilization_warnings(courses, venues, policy),
    ]
    is_valid = not any(error.severity in BLOCKING_SEVERITIES for error in errors)
    logger.info(
        "Pre-validation finished | courses=%s venues=%s errors=%s warnings=%s valid=%s",
        len(courses),
        len(venues),
        len(errors),
        len(warnings),
        is_valid,
    )
    return ValidationResult(is_valid=is_valid, errors=errors, warnings=warnings)
