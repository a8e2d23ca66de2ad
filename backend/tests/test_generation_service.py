import pytest

from app.core.config import Settings
from app.schemas.generator import FallbackOptions, SchedulingPolicy
from app.services.generation_service import default_policy, generate_enhanced_schedule
from app.services.reporting import report_for_result


def assert_conserved(result) -> None:
    summary = result.summary
    assert summary.scheduled_courses + summary.conflicted_courses == summary.total_courses
    assert summary.scheduled_courses == len(result.schedule)


def test_clean_run_is_complete(make_course, make_venue):
    courses = [make_course(lecturer="Dr. X", class_size=20), make_course(lecturer="Dr. X", class_size=20)]

    result = generate_enhanced_schedule(courses, [make_venue(capacity=50)], policy=SchedulingPolicy())

    assert result.success is True
    assert result.status == "complete"
    assert result.conflicts == []
    assert result.fallbacks_applied is None
    assert result.pre_validation_passed is True
    assert result.summary.success_rate == 100
    assert_conserved(result)


def test_blocking_errors_without_fallbacks_fail(make_course, make_venue):
    course = make_course(code="CS101", class_size=500)

    result = generate_enhanced_schedule(
        [course],
        [make_venue(capacity=300)],
        enable_fallbacks=False,
        policy=SchedulingPolicy(),
    )

    assert result.success is False
    assert result.status == "failed"
    assert result.schedule == []
    assert result.pre_validation_passed is False
    assert [conflict.conflict_type for conflict in result.conflicts] == ["venue"]
    assert result.conflicts[0].severity == "critical"
    assert result.conflicts[0].suggestion == "Split into 2 sections of 250"
    assert_conserved(result)


def test_fallback_splits_oversized_class_and_retries(make_course, make_venue):
    course = make_course(code="CS101", class_size=500)

    result = generate_enhanced_schedule([course], [make_venue(id="hall", capacity=300)], policy=SchedulingPolicy())

    assert result.status == "complete"
    assert "Split 1 oversized classes" in result.fallbacks_applied
    assert "Added 1 additional venue slots" in result.fallbacks_applied
    assert sorted(item.code for item in result.schedule) == ["CS101.1", "CS101.2"]
    assert all(item.class_size <= item.venue.capacity for item in result.schedule)
    assert result.summary.total_courses == 2
    assert result.pre_validation_passed is False
    assert_conserved(result)


def test_lecturer_exhaustion_is_partial(make_course, make_venue):
    courses = [make_course(lecturer="Dr. Busy", class_size=20) for _ in range(20)]

    result = generate_enhanced_schedule(courses, [make_venue(capacity=50)], policy=SchedulingPolicy())

    assert result.status == "partial"
    assert result.success is True
    assert result.schedule
    assert result.conflicts
    assert result.fallbacks_applied is not None
    assert result.summary.success_rate < 100
    assert_conserved(result)


def test_fallback_runs_at_most_once(make_course, make_venue, monkeypatch):
    from app.services import generation_service

    calls = []
    original = generation_service.generate_schedule_from_courses

    def counting(*args, **kwargs):
        calls.append(1)
        return original(*args, **kwargs)

    monkeypatch.setattr(generation_service, "generate_schedule_from_courses", counting)
    courses = [make_course(lecturer="Dr. Busy", class_size=20) for _ in range(20)]

    generate_enhanced_schedule(courses, [make_venue(capacity=50)], policy=SchedulingPolicy())

    assert len(calls) == 2


def test_no_venues_becomes_system_error(make_course):
    course = make_course()

    result = generate_enhanced_schedule([course], [], policy=SchedulingPolicy())

    assert result.success is False
    assert result.status == "failed"
    assert len(result.conflicts) == 1
    conflict = result.conflicts[0]
    assert conflict.conflict_type == "system-error"
    assert conflict.severity == "critical"
    assert conflict.course.id == course.id
    assert_conserved(result)


def test_empty_course_list_is_complete(make_venue):
    result = generate_enhanced_schedule([], [make_venue()], policy=SchedulingPolicy())

    assert result.success is True
    assert result.status == "complete"
    assert result.summary.total_courses == 0
    assert result.summary.success_rate == 100


def test_supplied_validation_is_trusted(make_course, make_venue):
    from app.schemas.validation import ValidationResult

    course = make_course(code="CS101", class_size=500)

    result = generate_enhanced_schedule(
        [course],
        [make_venue(capacity=300)],
        validation_result=ValidationResult(is_valid=True),
        enable_fallbacks=False,
        policy=SchedulingPolicy(),
    )

    assert result.pre_validation_passed is True
    assert result.status == "failed"
    assert result.conflicts[0].conflict_type == "venue"


def test_shared_courses_are_grouped_before_placement(make_course, make_venue):
    courses = [
        make_course(code="GST101", department="Computer Science", class_size=100, lecturer="Dr. G"),
        make_course(code="GST101", department="Cyber Security", class_size=140, lecturer="Dr. H"),
    ]

    result = generate_enhanced_schedule(courses, [make_venue(capacity=150)], policy=SchedulingPolicy())

    assert len(result.course_groups) == 1
    assert result.course_groups[0].is_shared_course is True
    sizes = sorted(item.class_size for item in result.schedule)
    assert sizes == [100, 120]
    assert all("grouped_with:GST101" in item.constraints for item in result.schedule)


def test_redistribution_option_reaches_fallback(make_course, make_venue):
    courses = [make_course(lecturer="Dr. X", class_size=10) for _ in range(12)]

    result = generate_enhanced_schedule(
        courses,
        [make_venue(capacity=500)],
        fallback_options=FallbackOptions(redistribute_lecturers=True),
        policy=SchedulingPolicy(),
    )

    flagged = [item for item in result.schedule if item.lecturer.endswith("(Reassignment Needed)")]
    assert "Redistributed courses for 1 lecturers" in result.fallbacks_applied
    assert len(flagged) == 4


def test_report_groups_conflicts_by_type(make_course, make_venue):
    courses = [make_course(lecturer="Dr. Busy", class_size=20) for _ in range(20)]
    result = generate_enhanced_schedule(courses, [make_venue(capacity=50)], policy=SchedulingPolicy())

    report = report_for_result(result)

    assert report.total_conflicts == len(result.conflicts)
    assert report.groups[0].title == "Lecturer Conflicts"
    assert report.groups[0].solution_steps[0] == "Review lecturer availability and workload"
    assert report.validation_errors_by_type == {"lecturer_overload": 1}


def test_default_policy_reads_settings():
    settings = Settings(max_classes_per_day=3, exam_overflow_tolerance=0.05)

    policy = default_policy(settings)

    assert policy.max_classes_per_day == 3
    assert policy.exam_overflow_tolerance == pytest.approx(0.05)
    assert policy.max_consecutive_hours == 2


def test_run_logs_lecturer_and_level_counts(make_course, make_venue, caplog):
    courses = [
        make_course(code="CSC201", lecturer="Dr. A", class_size=20),
        make_course(code="CSC301", lecturer="Dr. A", class_size=20),
        make_course(code="CSC302", lecturer="Dr. B", class_size=20),
    ]

    with caplog.at_level("INFO", logger="app.services.generation_service"):
        generate_enhanced_schedule(courses, [make_venue(capacity=50)], policy=SchedulingPolicy())

    assert "Generation started | courses=3 lecturers=2 levels=2 venues=1" in caplog.text
