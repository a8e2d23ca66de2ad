from __future__ import annotations

import re
from typing import Iterable

from app.schemas.timetable import CoursePayload
from app.services.time_grid import SHORT_BLOCK_HOURS, STANDARD_BLOCK_HOURS

FOUNDATIONAL_CODE_PATTERN = re.compile(r"^[A-Z]{2}10[0-9]")
BASE_CODE_PATTERN = re.compile(r"([A-Z]{2,4})\s?(\d{3})", re.IGNORECASE)
CODE_PREFIX_PATTERN = re.compile(r"^([A-Z]{2,4})")
FIRST_DIGIT_PATTERN = re.compile(r"\d")

SHORT_SESSION_PREFIXES = frozenset({"GST"})
SHORT_SESSION_CONSTRAINT = "short_session"
VALID_ACADEMIC_LEVELS = frozenset({1, 2, 3, 4})


def is_foundational_course(code: str) -> bool:
    return bool(FOUNDATIONAL_CODE_PATTERN.match((code or "").strip().upper()))


def base_course_code(code: str) -> str:
    """Normalise "GST 101", "gst101" and "GST101.2" to "GST101".

    Codes that do not look like prefix + three digits are returned uppercased
    and stripped so they still bucket deterministically.
    """
    match = BASE_CODE_PATTERN.search(code or "")
    if match is None:
        return (code or "").strip().upper()
    return f"{match.group(1)}{match.group(2)}".upper()


def code_prefix(code: str) -> str:
    match = CODE_PREFIX_PATTERN.match((code or "").strip().upper())
    return match.group(1) if match else ""


def academic_level_of(code: str) -> int | None:
    match = FIRST_DIGIT_PATTERN.search(code or "")
    if match is None:
        return None
    level = int(match.group(0))
    return level if level in VALID_ACADEMIC_LEVELS else None


def course_level(course: CoursePayload) -> int | None:
    if course.academic_level:
        match = FIRST_DIGIT_PATTERN.search(course.academic_level)
        if match is not None:
            return int(match.group(0))
    return academic_level_of(course.code)


def count_academic_levels(courses: Iterable[CoursePayload]) -> int:
    return len({level for level in (course_level(course) for course in courses) if level is not None})


def count_active_lecturers(courses: Iterable[CoursePayload]) -> int:
    return len({course.lecturer for course in courses if course.lecturer})


def is_short_session(course: CoursePayload) -> bool:
    if code_prefix(course.code) in SHORT_SESSION_PREFIXES:
        return True
    return any(constraint.strip().lower() == SHORT_SESSION_CONSTRAINT for constraint in course.constraints)


def class_duration_hours(course: CoursePayload) -> int:
    return SHORT_BLOCK_HOURS if is_short_session(course) else STANDARD_BLOCK_HOURS


def missing_fields(course: CoursePayload) -> list[str]:
    missing: list[str] = []
    if not course.code:
        missing.append("course code")
    if not course.name:
        missing.append("course name")
    if not course.lecturer:
        missing.append("lecturer")
    if not course.department:
        missing.append("department")
    if course.class_size <= 0:
        missing.append("class size")
    return missing
