from __future__ import annotations

from dataclasses import dataclass

from app.schemas.timetable import WEEKDAYS, TimeSlot

BUSINESS_START_MINUTES = 8 * 60
BUSINESS_END_MINUTES = 17 * 60
MIN_CLASS_MINUTES = 60
MAX_CLASS_MINUTES = 120

STANDARD_BLOCK_HOURS = 2
SHORT_BLOCK_HOURS = 1


@dataclass(frozen=True)
class ExamSession:
    name: str
    start_time: str
    end_time: str


EXAM_SESSIONS: tuple[ExamSession, ...] = (
    ExamSession(name="Morning", start_time="08:00", end_time="11:00"),
    ExamSession(name="Midday", start_time="12:00", end_time="15:00"),
    ExamSession(name="Afternoon", start_time="15:30", end_time="18:30"),
)


def candidate_start_hours(duration_hours: int) -> list[int]:
    """Start hours for a block of ``duration_hours`` inside business hours.

    Two-hour blocks start 8..15 and one-hour blocks 8..16.
    """
    if duration_hours not in (SHORT_BLOCK_HOURS, STANDARD_BLOCK_HOURS):
        raise ValueError(f"Unsupported block duration: {duration_hours}h")
    last_start = BUSINESS_END_MINUTES // 60 - duration_hours
    return list(range(BUSINESS_START_MINUTES // 60, last_start + 1))


def build_time_slot(day: str, start_hour: int, duration_hours: int) -> TimeSlot:
    return TimeSlot(day=day, start_time=f"{start_hour}:00", end_time=f"{start_hour + duration_hours}:00")


def candidate_time_slots(duration_hours: int, days: tuple[str, ...] | list[str] = WEEKDAYS) -> list[TimeSlot]:
    return [
        build_time_slot(day, hour, duration_hours)
        for day in days
        for hour in candidate_start_hours(duration_hours)
    ]


def overlaps(a: TimeSlot, b: TimeSlot) -> bool:
    # Half-open intervals: touching endpoints do not conflict.
    if a.day != b.day:
        return False
    return a.start_minutes < b.end_minutes and b.start_minutes < a.end_minutes


def contains(outer: TimeSlot, inner: TimeSlot) -> bool:
    return (
        outer.day == inner.day
        and outer.start_minutes <= inner.start_minutes
        and inner.end_minutes <= outer.end_minutes
    )


def is_business_hours(slot: TimeSlot) -> bool:
    if slot.day not in WEEKDAYS:
        return False
    if slot.start_minutes < BUSINESS_START_MINUTES or slot.end_minutes > BUSINESS_END_MINUTES:
        return False
    return MIN_CLASS_MINUTES <= slot.duration_minutes <= MAX_CLASS_MINUTES
