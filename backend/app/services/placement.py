from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from app.schemas.conflict import ScheduleConflict
from app.schemas.generator import PlacementResult, SchedulingPolicy
from app.schemas.timetable import WEEKDAYS, CoursePayload, ScheduleItem, TimeSlot, VenuePayload
from app.services.course_rules import class_duration_hours, is_foundational_course, missing_fields
from app.services.time_grid import candidate_time_slots, contains, overlaps
from app.services.venue_allocator import VenueAllocator, max_venue_capacity, suggest_split
from app.services.workload import classes_on_day, exceeds_consecutive_hours, lecturer_day_load

logger = logging.getLogger(__name__)

NO_SLOT_REASON = "No suitable time slot available due to lecturer scheduling constraints."


@dataclass(frozen=True)
class Placement:
    venue: VenuePayload
    time_slot: TimeSlot


def has_conflict(
    schedule: Sequence[ScheduleItem],
    lecturer: str,
    venue_id: str,
    slot: TimeSlot,
) -> bool:
    for item in schedule:
        if item.lecturer != lecturer and item.venue.id != venue_id:
            continue
        if overlaps(item.time_slot, slot):
            return True
    return False


def has_consecutive_classes(
    schedule: Sequence[ScheduleItem],
    lecturer: str,
    slot: TimeSlot,
    max_consecutive_hours: int,
) -> bool:
    return exceeds_consecutive_hours(schedule, lecturer, slot, max_consecutive_hours)


def venue_is_available(venue: VenuePayload, slot: TimeSlot) -> bool:
    if not venue.availability:
        return True
    return any(contains(window, slot) for window in venue.availability)


def order_days_by_load(
    schedule: Sequence[ScheduleItem],
    lecturer: str,
    preferred_days: Sequence[str] = (),
) -> list[str]:
    """Preferred days first, then the lecturer's lightest days."""
    load = lecturer_day_load(schedule, lecturer)
    preferred = [day for day in WEEKDAYS if day in preferred_days]
    remaining = sorted(
        (day for day in WEEKDAYS if day not in preferred),
        key=lambda day: (load.get(day, 0), WEEKDAYS.index(day)),
    )
    return preferred + remaining


def _ordered_slots(course: CoursePayload, day: str, duration: int) -> list[TimeSlot]:
    slots = candidate_time_slots(duration, (day,))
    preferred: list[TimeSlot] = []
    for wanted in course.preferred_slots or []:
        for slot in slots:
            same_hour = slot.start_minutes // 60 == wanted.start_minutes // 60
            if slot.day == wanted.day and same_hour and slot not in preferred:
                preferred.append(slot)
    return preferred + [slot for slot in slots if slot not in preferred]


def find_next_best_time_slot(
    course: CoursePayload,
    ranked_venues: Sequence[VenuePayload],
    schedule: Sequence[ScheduleItem],
    policy: SchedulingPolicy,
    *,
    enforce_daily_cap: bool = True,
) -> Placement | None:
    duration = class_duration_hours(course)
    preferred_days = [slot.day for slot in course.preferred_slots or []]
    for day in order_days_by_load(schedule, course.lecturer, preferred_days):
        if enforce_daily_cap and classes_on_day(schedule, course.lecturer, day) >= policy.max_classes_per_day:
            continue
        for slot in _ordered_slots(course, day, duration):
            if has_consecutive_classes(schedule, course.lecturer, slot, policy.max_consecutive_hours):
                continue
            for venue in ranked_venues:
                if not venue_is_available(venue, slot):
                    continue
                if has_conflict(schedule, course.lecturer, venue.id, slot):
                    continue
                return Placement(venue=venue, time_slot=slot)
    return None


def sort_courses_for_placement(courses: Sequence[CoursePayload]) -> list[CoursePayload]:
    return sorted(courses, key=lambda course: (not is_foundational_course(course.code), -course.class_size))


def _oversize_conflict(course: CoursePayload, venues: Sequence[VenuePayload]) -> ScheduleConflict:
    max_capacity = max_venue_capacity(venues)
    split = suggest_split(course, venues)
    if split is None:
        return ScheduleConflict(
            course=course,
            reason=f"Class size ({course.class_size}) exceeds maximum venue capacity ({max_capacity}).",
            conflict_type="venue",
            severity="critical",
            suggestion="Add venues before scheduling",
        )
    return ScheduleConflict(
        course=course,
        reason=(
            f"Class size ({course.class_size}) exceeds maximum venue capacity ({max_capacity}). "
            f"Suggestion: Split into {split.groups} groups of {split.suggested_size} students."
        ),
        conflict_type="venue",
        severity="critical",
        suggestion=f"Split into {split.groups} sections of {split.suggested_size}",
    )


def generate_schedule_from_courses(
    courses: Sequence[CoursePayload],
    venues: Sequence[VenuePayload],
    policy: SchedulingPolicy | None = None,
) -> PlacementResult:
    """Greedy, non-backtracking placement.

    Courses are taken foundational first, then largest first. A placed course
    is never revisited, so a later course may fail even where a global solver
    would have found room for both.
    """
    policy = policy or SchedulingPolicy()
    allocator = VenueAllocator()
    schedule: list[ScheduleItem] = []
    conflicts: list[ScheduleConflict] = []

    for course in sort_courses_for_placement(courses):
        missing = missing_fields(course)
        if missing:
            conflicts.append(
                ScheduleConflict(
                    course=course,
                    reason=f"Course {course.code or 'Unknown'} is missing: {', '.join(missing)}",
                    conflict_type="resource",
                    severity="critical",
                    suggestion="Complete all required course information before scheduling",
                )
            )
            continue

        ranked_venues = allocator.rank(course.class_size, venues)
        if not ranked_venues:
            conflicts.append(_oversize_conflict(course, venues))
            continue

        placement = find_next_best_time_slot(course, ranked_venues, schedule, policy)
        if placement is None:
            placement = find_next_best_time_slot(
                course, ranked_venues, schedule, policy, enforce_daily_cap=False
            )
        if placement is None:
            conflicts.append(
                ScheduleConflict(
                    course=course,
                    reason=NO_SLOT_REASON,
                    conflict_type="lecturer",
                    severity="high",
                    suggestion="Reduce the lecturer's load or free up a time slot",
                )
            )
            continue

        schedule.append(ScheduleItem.place(course, placement.venue, placement.time_slot))

    logger.info(
        "Placement finished | courses=%s scheduled=%s conflicts=%s",
        len(courses),
        len(schedule),
        len(conflicts),
    )
    return PlacementResult(schedule=schedule, conflicts=conflicts)
