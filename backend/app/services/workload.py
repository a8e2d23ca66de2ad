from __future__ import annotations

from collections import Counter
from typing import Iterable

from app.schemas.timetable import WEEKDAYS, CoursePayload, ScheduleItem, TimeSlot


def lecturer_course_counts(courses: Iterable[CoursePayload]) -> Counter[str]:
    return Counter(course.lecturer for course in courses if course.lecturer)


def lecturer_day_load(schedule: Iterable[ScheduleItem], lecturer: str) -> dict[str, int]:
    load = {day: 0 for day in WEEKDAYS}
    for item in schedule:
        if item.lecturer == lecturer:
            load[item.time_slot.day] = load.get(item.time_slot.day, 0) + 1
    return load


def classes_on_day(schedule: Iterable[ScheduleItem], lecturer: str, day: str) -> int:
    return sum(1 for item in schedule if item.lecturer == lecturer and item.time_slot.day == day)


def contiguous_block_minutes(intervals: list[tuple[int, int]], candidate: tuple[int, int]) -> int:
    """Length of the merged run of touching/overlapping intervals containing ``candidate``."""
    start, end = candidate
    changed = True
    remaining = list(intervals)
    while changed:
        changed = False
        for interval in list(remaining):
            if interval[0] <= end and start <= interval[1]:
                start = min(start, interval[0])
                end = max(end, interval[1])
                remaining.remove(interval)
                changed = True
    return end - start


def exceeds_consecutive_hours(
    schedule: Iterable[ScheduleItem],
    lecturer: str,
    slot: TimeSlot,
    max_consecutive_hours: int,
) -> bool:
    intervals = [
        (item.time_slot.start_minutes, item.time_slot.end_minutes)
        for item in schedule
        if item.lecturer == lecturer and item.time_slot.day == slot.day
    ]
    block = contiguous_block_minutes(intervals, (slot.start_minutes, slot.end_minutes))
    return block > max_consecutive_hours * 60
