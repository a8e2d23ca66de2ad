from itertools import combinations

from app.schemas.generator import SchedulingPolicy
from app.schemas.timetable import ScheduleItem, TimeSlot
from app.services.placement import (
    NO_SLOT_REASON,
    generate_schedule_from_courses,
    has_conflict,
    has_consecutive_classes,
    order_days_by_load,
    sort_courses_for_placement,
)
from app.services.time_grid import is_business_hours, overlaps


def assert_no_double_booking(schedule: list[ScheduleItem]) -> None:
    for first, second in combinations(schedule, 2):
        if first.lecturer == second.lecturer or first.venue.id == second.venue.id:
            assert not overlaps(first.time_slot, second.time_slot), (first.code, second.code)


def test_empty_input_gives_empty_result(make_venue):
    result = generate_schedule_from_courses([], [make_venue()])

    assert result.schedule == []
    assert result.conflicts == []


def test_same_lecturer_gets_non_overlapping_slots(make_course, make_venue):
    courses = [
        make_course(code="A", lecturer="Dr. X", class_size=20),
        make_course(code="B", lecturer="Dr. X", class_size=20),
    ]

    result = generate_schedule_from_courses(courses, [make_venue(capacity=50)])

    assert result.conflicts == []
    assert len(result.schedule) == 2
    first, second = result.schedule
    assert not overlaps(first.time_slot, second.time_slot)


def test_foundational_and_large_courses_go_first(make_course):
    courses = [
        make_course(code="CSC301", class_size=200),
        make_course(code="GST101", class_size=50),
        make_course(code="CSC201", class_size=90),
        make_course(code="MT102", class_size=80),
    ]

    ordered = [course.code for course in sort_courses_for_placement(courses)]

    assert ordered == ["MT102", "CSC301", "CSC201", "GST101"]


def test_oversized_course_is_never_attempted(make_course, make_venue):
    course = make_course(code="CS101", class_size=500)

    result = generate_schedule_from_courses([course], [make_venue(capacity=300)])

    assert result.schedule == []
    assert len(result.conflicts) == 1
    conflict = result.conflicts[0]
    assert conflict.conflict_type == "venue"
    assert conflict.severity == "critical"
    assert conflict.reason == (
        "Class size (500) exceeds maximum venue capacity (300). "
        "Suggestion: Split into 2 groups of 250 students."
    )


def test_missing_data_course_is_reported_not_placed(make_course, make_venue):
    result = generate_schedule_from_courses([make_course(lecturer="")], [make_venue()])

    assert result.schedule == []
    assert result.conflicts[0].conflict_type == "resource"


def test_lecturer_exhaustion_reports_conflict(make_course, make_venue):
    # With a gap required between two-hour blocks a lecturer fits three per day, fifteen per week.
    courses = [make_course(code=f"CSC{400 + i}", lecturer="Dr. Busy", class_size=20) for i in range(25)]

    result = generate_schedule_from_courses(courses, [make_venue(capacity=50), make_venue(capacity=50)])

    assert result.schedule
    assert result.conflicts
    assert all(conflict.reason == NO_SLOT_REASON for conflict in result.conflicts)
    assert all(conflict.conflict_type == "lecturer" for conflict in result.conflicts)
    assert len(result.schedule) + len(result.conflicts) == 25
    assert_no_double_booking(result.schedule)


def test_schedule_respects_capacity_hours_and_exclusivity(make_course, make_venue):
    courses = [
        make_course(lecturer=f"Dr. {i % 4}", class_size=20 + 15 * (i % 6), code=f"CSC{300 + i}")
        for i in range(30)
    ]
    venues = [make_venue(capacity=60), make_venue(capacity=120), make_venue(capacity=40)]

    result = generate_schedule_from_courses(courses, venues)

    assert result.schedule
    assert_no_double_booking(result.schedule)
    for item in result.schedule:
        assert item.class_size <= item.venue.capacity
        assert is_business_hours(item.time_slot)


def test_back_to_back_blocks_are_not_allowed(make_course, make_venue):
    venue = make_venue()
    placed = ScheduleItem.place(
        make_course(lecturer="Dr. Gap"),
        venue,
        TimeSlot(day="Monday", startTime="8:00", endTime="10:00"),
    )

    touching = TimeSlot(day="Monday", startTime="10:00", endTime="12:00")
    with_gap = TimeSlot(day="Monday", startTime="11:00", endTime="13:00")

    assert has_consecutive_classes([placed], "Dr. Gap", touching, 2)
    assert not has_consecutive_classes([placed], "Dr. Gap", with_gap, 2)
    assert not has_consecutive_classes([placed], "Dr. Gap", touching, 4)
    assert not has_conflict([placed], "Dr. Other", "elsewhere", touching)
    assert has_conflict([placed], "Dr. Other", venue.id, TimeSlot(day="Monday", startTime="9:00", endTime="11:00"))


def test_days_ordered_by_lecturer_load(make_course, make_venue):
    venue = make_venue()
    schedule = [
        ScheduleItem.place(make_course(lecturer="Dr. L"), venue, TimeSlot(day=day, startTime="8:00", endTime="10:00"))
        for day in ("Monday", "Monday", "Tuesday", "Thursday")
    ]

    assert order_days_by_load(schedule, "Dr. L") == ["Wednesday", "Friday", "Tuesday", "Thursday", "Monday"]
    assert order_days_by_load(schedule, "Dr. L", ["Monday"])[0] == "Monday"


def test_preferred_slot_is_used_when_free(make_course, make_venue):
    course = make_course(
        lecturer="Dr. P",
        preferred_slots=[TimeSlot(day="Thursday", startTime="14:00", endTime="16:00")],
    )

    result = generate_schedule_from_courses([course], [make_venue()])

    assert result.schedule[0].time_slot.label() == "Thursday 14:00-16:00"


def test_venue_availability_windows_are_honoured(make_course, make_venue):
    venue = make_venue(availability=[TimeSlot(day="Wednesday", startTime="13:00", endTime="17:00")])

    result = generate_schedule_from_courses([make_course()], [venue])

    placed = result.schedule[0].time_slot
    assert placed.day == "Wednesday"
    assert placed.start_minutes >= 13 * 60


def test_daily_cap_is_relaxed_on_retry(make_course, make_venue):
    policy = SchedulingPolicy(max_classes_per_day=1, max_consecutive_hours=2)
    courses = [make_course(lecturer="Dr. Cap", code=f"CSC{500 + i}") for i in range(6)]

    result = generate_schedule_from_courses(courses, [make_venue()], policy)

    assert len(result.schedule) == 6
    assert result.conflicts == []


def test_class_never_lands_in_a_smaller_venue(make_course, make_venue):
    course = make_course(class_size=105)
    policy = SchedulingPolicy.model_validate({"venueOverflowTolerance": 0.1})

    result = generate_schedule_from_courses([course], [make_venue(capacity=100)], policy)

    assert result.schedule == []
    assert [(c.conflict_type, c.severity) for c in result.conflicts] == [("venue", "critical")]
    assert result.conflicts[0].reason.startswith("Class size (105) exceeds maximum venue capacity (100).")
    assert not hasattr(policy, "venue_overflow_tolerance")


def test_slots_follow_the_business_grid(make_course, make_venue):
    short = make_course(code="GST102", lecturer="Dr. Grid")

    result = generate_schedule_from_courses([short], [make_venue()])

    placed = result.schedule[0].time_slot
    assert placed.duration_minutes == 60
    assert placed.label() == "Monday 8:00-9:00"
