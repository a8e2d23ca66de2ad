"""Seed demo venues, courses and exam courses for SlotWise.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from sqlalchemy import func, select

from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.models.course import Course
from app.models.venue import Venue
from app.schemas.exam import ExamCoursePayload
from app.services import schedule_store
from app.services.course_rules import base_course_code
from app.services.exam_scheduler import merge_exam_courses

COLLEGE = os.getenv("SEED_COLLEGE", "College of Computing").strip() or "College of Computing"
WORKING_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]

VENUES = [
    ("Main Auditorium", 400),
    ("Lecture Theatre 1", 250),
    ("Lecture Theatre 2", 250),
    ("Room 101", 120),
    ("Room 102", 120),
    ("Room 201", 80),
    ("Seminar Room", 40),
]


@dataclass(frozen=True)
class CourseSeed:
    code: str
    name: str
    lecturer: str
    class_size: int
    department: str
    academic_level: str
    constraints: tuple[str, ...] = ()


COURSES = [
    # Shared service courses, taught to every department.
    CourseSeed("GST101", "Use of English I", "Dr. Adaeze Okafor", 180, "Computer Science", "100"),
    CourseSeed("GST101", "Use of English I", "Dr. Adaeze Okafor", 150, "Cyber Security", "100"),
    CourseSeed("GST101", "Use of English I", "Dr. Adaeze Okafor", 120, "Software Engineering", "100"),
    CourseSeed("ENG101", "Technical Writing", "Dr. Halima Sani", 90, "Computer Science", "100"),
    CourseSeed("ENG101", "Technical Writing", "Dr. Halima Sani", 110, "Software Engineering", "100"),
    CourseSeed("MTH101", "Elementary Mathematics I", "Prof. Bello Hassan", 170, "Computer Science", "100"),
    CourseSeed("MTH101", "Elementary Mathematics I", "Prof. Bello Hassan", 140, "Cyber Security", "100"),
    CourseSeed("PHY101", "General Physics I", "Dr. Chidi Nwosu", 160, "Computer Science", "100"),
    CourseSeed("CS101", "Introduction to Computing", "Dr. Funmi Adeyemi", 220, "Computer Science", "100"),
    CourseSeed("CSC201", "Computer Programming I", "Dr. Funmi Adeyemi", 150, "Computer Science", "200"),
    CourseSeed("CSC203", "Discrete Structures", "Dr. Ibrahim Musa", 140, "Computer Science", "200"),
    CourseSeed("CYB201", "Introduction to Cyber Security", "Dr. Kemi Lawal", 110, "Cyber Security", "200"),
    CourseSeed("SEN201", "Software Requirements", "Dr. Tunde Ajayi", 90, "Software Engineering", "200"),
    CourseSeed("CSC301", "Data Structures", "Dr. Ibrahim Musa", 120, "Computer Science", "300"),
    CourseSeed("CSC305", "Operating Systems", "Prof. Ngozi Eze", 110, "Computer Science", "300"),
    CourseSeed("CYB305", "Network Security", "Dr. Kemi Lawal", 85, "Cyber Security", "300", ("morning_time_only",)),
    CourseSeed("SEN303", "Software Architecture", "Dr. Tunde Ajayi", 75, "Software Engineering", "300"),
    CourseSeed("CSC401", "Compiler Construction", "Prof. Ngozi Eze", 70, "Computer Science", "400"),
    CourseSeed("CSC405", "Machine Learning", "Dr. Yusuf Garba", 95, "Computer Science", "400"),
    CourseSeed("CSC499", "Project Seminar", "Dr. Yusuf Garba", 35, "Computer Science", "400", ("short_session",)),
]


def build_venue_availability() -> list[dict]:
    return [{"day": day, "start_time": "8:00", "end_time": "17:00"} for day in WORKING_DAYS]


def upsert_venues(session) -> int:
    created = 0
    for name, capacity in VENUES:
        venue = session.execute(select(Venue).where(Venue.name == name)).scalar_one_or_none()
        if venue is None:
            session.add(Venue(name=name, capacity=capacity, availability=build_venue_availability()))
            created += 1
            continue
        venue.capacity = capacity
    return created


def upsert_courses(session) -> int:
    created = 0
    for seed in COURSES:
        course = session.execute(
            select(Course).where(Course.code == seed.code, Course.department == seed.department)
        ).scalar_one_or_none()
        if course is None:
            course = Course(code=seed.code, department=seed.department, preferred_slots=[])
            session.add(course)
            created += 1
        course.name = seed.name
        course.lecturer = seed.lecturer
        course.class_size = seed.class_size
        course.academic_level = seed.academic_level
        course.constraints = list(seed.constraints)
    return created


def seed_exam_courses(session) -> int:
    """Mirror the class courses as exam courses, one row per department offering."""
    session.flush()
    courses = session.execute(select(Course).order_by(Course.code, Course.department)).scalars().all()
    payloads = [
        {
            "course_code": base_course_code(course.code),
            "course_title": course.name,
            "department": course.department,
            "college": COLLEGE,
            "level": course.academic_level or "",
            "student_count": course.class_size,
        }
        for course in courses
    ]
    replaced = schedule_store.replace_exam_courses(
        session,
        [ExamCoursePayload.model_validate(item) for item in payloads],
    )
    return len(replaced)


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        venues_created = upsert_venues(session)
        courses_created = upsert_courses(session)
        session.commit()
        exam_count = seed_exam_courses(session)

        venue_count = session.execute(select(func.count(Venue.id))).scalar_one()
        course_count = session.execute(select(func.count(Course.id))).scalar_one()
        sittings = len(merge_exam_courses(schedule_store.fetch_exam_courses(session)))

    print("SlotWise demo data seeded successfully.")
    print("")
    print(f"Venues: {venue_count} ({venues_created} new)")
    print(f"Courses: {course_count} ({courses_created} new)")
    print(f"Exam courses: {exam_count} ({sittings} merged sittings)")
    print("")
    print("Generate a timetable with: POST /api/schedule/generate {\"persist\": true}")


if __name__ == "__main__":
    main()
