from __future__ import annotations

import logging
import math
from typing import Sequence

from app.schemas.conflict import ScheduleConflict
from app.schemas.generator import FallbackOptions, FallbackResult, SchedulingPolicy
from app.schemas.timetable import CoursePayload, VenuePayload
from app.schemas.validation import ValidationErrorEntry
from app.services.venue_allocator import max_venue_capacity
from app.services.workload import lecturer_course_counts

logger = logging.getLogger(__name__)

REASSIGNMENT_SUFFIX = "(Reassignment Needed)"
EXTENDED_HOURS_SUFFIX = "(Extended Hours)"
UNPLACED_CONFLICT_TYPES = frozenset({"lecturer", "venue"})


def split_oversized_classes(
    courses: Sequence[CoursePayload],
    venues: Sequence[VenuePayload],
) -> tuple[list[CoursePayload], int]:
    max_capacity = max_venue_capacity(venues)
    if max_capacity <= 0:
        return list(courses), 0

    result: list[CoursePayload] = []
    split_count = 0
    for course in courses:
        if course.class_size <= max_capacity:
            result.append(course)
            continue
        sections = math.ceil(course.class_size / max_capacity)
        per_section = math.ceil(course.class_size / sections)
        for index in range(sections):
            number = index + 1
            result.append(
                course.model_copy(
                    update={
                        "id": f"{course.id}_section_{number}",
                        "code": f"{course.code}.{number}",
                        "name": f"{course.name} (Section {number})",
                        "class_size": min(per_section, course.class_size - index * per_section),
                    }
                )
            )
        split_count += 1
    return result, split_count


def create_extended_venues(venues: Sequence[VenuePayload], count: int = 3) -> list[VenuePayload]:
    return [
        VenuePayload(
            id=f"{venue.id}_extended_{index}",
            name=f"{venue.name} {EXTENDED_HOURS_SUFFIX}",
            capacity=venue.capacity,
            availability=[],
        )
        for index, venue in enumerate(list(venues)[:count])
    ]


def relax_time_preferences(courses: Sequence[CoursePayload]) -> list[CoursePayload]:
    return [
        course.model_copy(
            update={
                "preferred_slots": None,
                "constraints": [constraint for constraint in course.constraints if "time" not in constraint],
            }
        )
        for course in courses
    ]


def redistribute_lecturer_load(
    courses: Sequence[CoursePayload],
    threshold: int = 8,
) -> tuple[list[CoursePayload], int]:
    """Flag every course beyond ``threshold`` for a lecturer as needing reassignment.

    Nothing is reassigned automatically; the lecturer name gets a suffix for
    an administrator to act on.
    """
    counts = lecturer_course_counts(courses)
    overloaded = {lecturer for lecturer, count in counts.items() if count > threshold}
    if not overloaded:
        return list(courses), 0

    seen: dict[str, int] = {}
    result: list[CoursePayload] = []
    for course in courses:
        if course.lecturer not in overloaded:
            result.append(course)
            continue
        seen[course.lecturer] = seen.get(course.lecturer, 0) + 1
        if seen[course.lecturer] > threshold:
            course = course.model_copy(update={"lecturer": f"{course.lecturer} {REASSIGNMENT_SUFFIX}"})
        result.append(course)
    return result, len(overloaded)


def apply_fallback_strategies(
    courses: Sequence[CoursePayload],
    venues: Sequence[VenuePayload],
    errors: Sequence[ValidationErrorEntry],
    options: FallbackOptions | None = None,
    policy: SchedulingPolicy | None = None,
    placement_conflicts: Sequence[ScheduleConflict] = (),
) -> FallbackResult:
    options = options or FallbackOptions()
    policy = policy or SchedulingPolicy()
    applied: list[str] = []
    modified = list(courses)
    suggested_venues = list(venues)

    if options.split_large_classes:
        modified, split_count = split_oversized_classes(modified, venues)
        if split_count:
            applied.append(f"Split {split_count} oversized classes")

    needs_capacity = any(error.type == "venue_capacity" for error in errors) or any(
        conflict.conflict_type in UNPLACED_CONFLICT_TYPES for conflict in placement_conflicts
    )
    if options.add_extended_venues and needs_capacity:
        extra = create_extended_venues(venues, policy.extended_venue_count)
        if extra:
            suggested_venues = [*venues, *extra]
            applied.append(f"Added {len(extra)} additional venue slots")

    if options.use_alternative_time_slots:
        modified = relax_time_preferences(modified)
        applied.append("Relaxed time slot preferences")

    if options.redistribute_lecturers:
        modified, affected = redistribute_lecturer_load(modified, policy.lecturer_redistribution_threshold)
        if affected:
            applied.append(f"Redistributed courses for {affected} lecturers")

    if applied:
        logger.info("Applied fallback strategies: %s", "; ".join(applied))
    return FallbackResult(
        success=bool(applied),
        modified_courses=modified,
        suggested_venues=suggested_venues,
        fallbacks_applied=applied,
    )
