import pytest
from pydantic import ValidationError

from app.schemas.timetable import TimeSlot
from app.services.course_rules import (
    academic_level_of,
    base_course_code,
    class_duration_hours,
    count_academic_levels,
    count_active_lecturers,
    course_level,
    is_foundational_course,
)
from app.services.time_grid import (
    EXAM_SESSIONS,
    candidate_start_hours,
    candidate_time_slots,
    contains,
    is_business_hours,
    overlaps,
)


def slot(day: str, start: str, end: str) -> TimeSlot:
    return TimeSlot(day=day, startTime=start, endTime=end)


def test_candidate_start_hours_by_duration():
    assert candidate_start_hours(2) == list(range(8, 16))
    assert candidate_start_hours(1) == list(range(8, 17))
    with pytest.raises(ValueError):
        candidate_start_hours(3)


def test_candidate_time_slots_cover_every_weekday():
    slots = candidate_time_slots(2)
    assert len(slots) == 5 * 8
    assert slots[0].label() == "Monday 8:00-10:00"
    assert slots[-1].label() == "Friday 15:00-17:00"
    assert all(is_business_hours(item) for item in slots)


def test_overlap_is_half_open():
    assert overlaps(slot("Monday", "8:00", "10:00"), slot("Monday", "9:00", "11:00"))
    assert not overlaps(slot("Monday", "8:00", "10:00"), slot("Monday", "10:00", "12:00"))
    assert not overlaps(slot("Monday", "8:00", "10:00"), slot("Tuesday", "8:00", "10:00"))


def test_business_hours_bounds_and_duration():
    assert is_business_hours(slot("Friday", "15:00", "17:00"))
    assert not is_business_hours(slot("Friday", "7:00", "9:00"))
    assert not is_business_hours(slot("Friday", "16:00", "18:00"))
    assert not is_business_hours(slot("Friday", "8:00", "11:00"))
    assert not is_business_hours(slot("Friday", "8:00", "8:30"))


def test_contains_requires_same_day_and_window():
    window = slot("Monday", "8:00", "12:00")
    assert contains(window, slot("Monday", "10:00", "12:00"))
    assert not contains(window, slot("Monday", "11:00", "13:00"))
    assert not contains(window, slot("Tuesday", "8:00", "10:00"))


def test_time_slot_rejects_weekend_and_reversed_times():
    with pytest.raises(ValidationError):
        slot("Saturday", "8:00", "10:00")
    with pytest.raises(ValidationError):
        slot("Monday", "10:00", "8:00")
    assert slot("Mon", "8:00", "9:00").day == "Monday"


def test_exam_sessions_are_fixed_windows():
    assert [(s.name, s.start_time, s.end_time) for s in EXAM_SESSIONS] == [
        ("Morning", "08:00", "11:00"),
        ("Midday", "12:00", "15:00"),
        ("Afternoon", "15:30", "18:30"),
    ]


def test_course_code_helpers():
    assert is_foundational_course("MT101")
    assert not is_foundational_course("GST101")
    assert is_foundational_course("CS105")
    assert not is_foundational_course("CSC101")
    assert not is_foundational_course("CS201")
    assert base_course_code("gst 101") == "GST101"
    assert base_course_code("CSC101.2") == "CSC101"
    assert academic_level_of("CSC301") == 3
    assert academic_level_of("CSC901") is None
    assert academic_level_of("NOCODE") is None


def test_course_counters_and_duration(make_course):
    courses = [
        make_course(code="GST101", lecturer="Dr. A"),
        make_course(code="CSC201", lecturer="Dr. A"),
        make_course(code="CSC301", lecturer="Dr. B", constraints=["short_session"]),
        make_course(code="CSC302", lecturer=""),
    ]
    assert count_active_lecturers(courses) == 2
    assert count_academic_levels(courses) == 3
    assert class_duration_hours(courses[0]) == 1
    assert class_duration_hours(courses[1]) == 2
    assert class_duration_hours(courses[2]) == 1


def test_academic_level_field_outranks_course_code(make_course):
    relabelled = make_course(code="CSC301", academic_level="200 Level")
    unlabelled = make_course(code="CSC301")

    assert course_level(relabelled) == 2
    assert course_level(unlabelled) == 3
    assert count_academic_levels([relabelled, unlabelled]) == 2
