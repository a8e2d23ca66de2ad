import pytest

from app.schemas.timetable import ScheduleItem, TimeSlot
from app.services.conflict_service import ConflictService


@pytest.fixture
def hall(make_venue):
    return make_venue(id="r1", name="Room 1", capacity=100)


def placed(course, venue, day="Monday", start="9:00", end="11:00"):
    return ScheduleItem.place(course, venue, TimeSlot(day=day, startTime=start, endTime=end))


def test_detect_venue_conflict(make_course, hall):
    first = placed(make_course(id="c1", code="CSC101", lecturer="Prof A", class_size=50), hall)
    second = placed(make_course(id="c2", code="CSC102", lecturer="Prof B", class_size=50), hall, start="10:00", end="12:00")

    conflicts = ConflictService([first, second]).detect_conflicts()

    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict.conflict_type == "venue"
    assert conflict.severity == "high"
    assert "Venue overlap in Room 1" in conflict.reason
    assert conflict.course.id == "c2"


def test_detect_lecturer_conflict(make_course, make_venue):
    first = placed(make_course(id="c1", lecturer="Prof A"), make_venue(id="r1"))
    second = placed(make_course(id="c2", lecturer="Prof A"), make_venue(id="r2"))

    conflicts = ConflictService([first, second]).detect_conflicts()

    assert [conflict.conflict_type for conflict in conflicts] == ["lecturer"]
    assert "Lecturer overlap for Prof A" in conflicts[0].reason


def test_detect_capacity_conflict(make_course, hall):
    item = placed(make_course(id="c1", class_size=120), hall)

    conflicts = ConflictService([item]).detect_conflicts()

    assert len(conflicts) == 1
    assert conflicts[0].conflict_type == "venue"
    assert conflicts[0].severity == "critical"
    assert conflicts[0].reason == "Venue Room 1 capacity (100) < students (120)"


def test_no_conflict_for_touching_or_other_day_slots(make_course, hall):
    items = [
        placed(make_course(lecturer="Prof A"), hall, start="8:00", end="10:00"),
        placed(make_course(lecturer="Prof A"), hall, start="10:00", end="12:00"),
        placed(make_course(lecturer="Prof A"), hall, day="Tuesday", start="8:00", end="10:00"),
    ]

    service = ConflictService(items)

    assert service.detect_conflicts() == []
    assert service.affected_course_ids() == set()


def test_enforce_exclusivity_keeps_first_placement(make_course, make_venue, hall):
    first = placed(make_course(id="c1", code="CSC101", lecturer="Prof A"), hall)
    same_venue = placed(make_course(id="c2", code="CSC102", lecturer="Prof B"), hall)
    same_lecturer = placed(make_course(id="c3", code="CSC103", lecturer="Prof A"), make_venue(id="r2"))
    clear = placed(make_course(id="c4", code="CSC104", lecturer="Prof C"), make_venue(id="r3"))

    kept, dropped = ConflictService([first, same_venue, same_lecturer, clear]).enforce_exclusivity()

    assert [item.id for item in kept] == ["c1", "c4"]
    assert [(conflict.course.id, conflict.conflict_type) for conflict in dropped] == [
        ("c2", "venue"),
        ("c3", "lecturer"),
    ]
    assert dropped[0].reason == "CSC102 double-books the venue of CSC101 at Monday 9:00-11:00"


def test_affected_course_ids(make_course, hall):
    items = [
        placed(make_course(id="c1", lecturer="Prof A"), hall),
        placed(make_course(id="c2", lecturer="Prof B"), hall),
        placed(make_course(id="c3", lecturer="Prof C", class_size=150), hall, day="Friday"),
    ]

    assert ConflictService(items).affected_course_ids() == {"c2", "c3"}
