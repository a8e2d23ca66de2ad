from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Sequence

from app.core.exceptions import NoVenuesAvailableError, SchedulerError
from app.schemas.exam import (
    ExamConflict,
    ExamCoursePayload,
    ExamGenerationResult,
    ExamGenerationSummary,
    ExamScheduleItem,
)
from app.schemas.timetable import VenuePayload
from app.services.course_rules import base_course_code
from app.services.time_grid import EXAM_SESSIONS, ExamSession
from app.services.venue_allocator import VenueAllocator, max_venue_capacity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergedExam:
    representative: ExamCoursePayload
    student_count: int
    departments: tuple[str, ...]


def merge_exam_courses(courses: Sequence[ExamCoursePayload]) -> list[MergedExam]:
    """One sitting per normalised course code.

    The member with the largest enrolment represents the sitting and the
    student count is the sum over every department.
    """
    buckets: dict[str, list[ExamCoursePayload]] = {}
    for course in courses:
        buckets.setdefault(base_course_code(course.course_code), []).append(course)

    merged: list[MergedExam] = []
    for members in buckets.values():
        representative = max(members, key=lambda course: course.student_count)
        departments: list[str] = []
        for course in members:
            if course.department not in departments:
                departments.append(course.department)
        merged.append(
            MergedExam(
                representative=representative,
                student_count=sum(course.student_count for course in members),
                departments=tuple(departments),
            )
        )
    return merged


def exam_days(start_date: date, end_date: date) -> list[date]:
    if start_date >= end_date:
        raise SchedulerError("End date must be after start date")
    days: list[date] = []
    current = start_date
    while current <= end_date:
        if current.weekday() < 5:
            days.append(current)
        current += timedelta(days=1)
    return days


def _sessions(names: Sequence[str] | None) -> list[ExamSession]:
    if not names:
        return list(EXAM_SESSIONS)
    return [session for session in EXAM_SESSIONS if session.name in names]


def generate_exam_schedule(
    courses: Sequence[ExamCoursePayload],
    venues: Sequence[VenuePayload],
    start_date: date,
    end_date: date,
    *,
    sessions: Sequence[str] | None = None,
    overflow_tolerance: float = 0.10,
) -> ExamGenerationResult:
    """First-fit exam placement over weekdays x sessions x venues.

    Largest sittings go first. A venue hosts at most one sitting per session
    and may be overfilled by ``overflow_tolerance``.
    """
    days = exam_days(start_date, end_date)
    if not venues:
        raise NoVenuesAvailableError()

    allocator = VenueAllocator(overflow_tolerance=overflow_tolerance)
    windows = _sessions(sessions)
    occupied: set[tuple[date, str, str]] = set()
    schedule: list[ExamScheduleItem] = []
    conflicts: list[ExamConflict] = []

    merged = sorted(merge_exam_courses(courses), key=lambda exam: exam.student_count, reverse=True)
    for exam in merged:
        course = exam.representative
        ranked = allocator.rank(exam.student_count, venues)
        if not ranked:
            conflicts.append(
                ExamConflict(
                    course_code=course.course_code,
                    course_title=course.course_title,
                    student_count=exam.student_count,
                    reason=(
                        f"{exam.student_count} candidates exceed every venue "
                        f"(largest holds {max_venue_capacity(venues)})"
                    ),
                    conflict_type="venue",
                    severity="critical",
                    suggestion="Split the sitting across venues or add a larger venue",
                )
            )
            continue

        slot = next(
            (
                (day, window, venue)
                for day in days
                for window in windows
                for venue in ranked
                if (day, window.name, venue.id) not in occupied
            ),
            None,
        )
        if slot is None:
            conflicts.append(
                ExamConflict(
                    course_code=course.course_code,
                    course_title=course.course_title,
                    student_count=exam.student_count,
                    reason="No free exam session left in the date range",
                    conflict_type="resource",
                    severity="high",
                    suggestion="Extend the exam date range",
                )
            )
            continue

        day, window, venue = slot
        occupied.add((day, window.name, venue.id))
        schedule.append(
            ExamScheduleItem(
                exam_course_id=course.id,
                course_code=course.course_code,
                course_title=course.course_title,
                department=course.department,
                college=course.college,
                level=course.level,
                student_count=exam.student_count,
                shared_departments=list(exam.departments),
                day=day,
                session=window.name,
                start_time=window.start_time,
                end_time=window.end_time,
                venue_name=venue.name,
                venue_capacity=venue.capacity,
            )
        )

    schedule.sort(key=lambda item: (item.day, [w.name for w in EXAM_SESSIONS].index(item.session), item.venue_name))
    summary = ExamGenerationSummary(
        total_courses=len(merged),
        scheduled_courses=len(schedule),
        unscheduled_courses=len(merged) - len(schedule),
        exam_days=len(days),
        days_used=len({item.day for item in schedule}),
    )
    if not conflicts:
        message = f"Exam schedule generated for {len(schedule)} courses"
    elif schedule:
        message = (
            f"{len(schedule)}/{len(merged)} courses scheduled. "
            f"{len(merged) - len(schedule)} courses need attention"
        )
    else:
        message = "Exam schedule generation failed: no courses could be scheduled"
    logger.info(
        "Exam generation finished | sittings=%s scheduled=%s days=%s",
        len(merged),
        len(schedule),
        len(days),
    )
    return ExamGenerationResult(
        success=bool(schedule) or not conflicts,
        message=message,
        schedule=schedule,
        conflicts=conflicts,
        summary=summary,
    )
