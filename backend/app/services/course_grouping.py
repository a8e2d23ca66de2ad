from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import Sequence

from app.schemas.grouping import CourseGroup
from app.schemas.timetable import CoursePayload
from app.services.course_rules import base_course_code

logger = logging.getLogger(__name__)

# Shared-service courses taught identically to every department.
SHARED_COURSE_CODES = frozenset(
    {
        "GST101",
        "GST102",
        "GST103",
        "GST201",
        "GST202",
        "GST301",
        "ENG101",
        "ENG102",
        "MTH101",
        "MTH102",
        "PHY101",
        "CHM101",
        "BIO101",
        "STA101",
        "CSC101",
        "ECO101",
        "POL101",
    }
)

GROUPED_WITH_PREFIX = "grouped_with:"


def identify_shared_courses(courses: Sequence[CoursePayload]) -> list[CourseGroup]:
    buckets: dict[str, list[CoursePayload]] = defaultdict(list)
    for course in courses:
        buckets[base_course_code(course.code)].append(course)

    groups: list[CourseGroup] = []
    for code, members in buckets.items():
        departments: list[str] = []
        for course in members:
            if course.department and course.department not in departments:
                departments.append(course.department)
        groups.append(
            CourseGroup(
                course_code=code,
                departments=departments,
                total_students=sum(course.class_size for course in members),
                courses=members,
            )
        )
    return groups


def should_group_courses(group: CourseGroup) -> bool:
    return group.is_shared_course and len(group.courses) > 1 and group.course_code in SHARED_COURSE_CODES


def calculate_optimal_class_size(group: CourseGroup) -> int:
    if not group.departments:
        return group.total_students
    return math.ceil(group.total_students / len(group.departments))


def apply_grouping(courses: Sequence[CoursePayload], groups: Sequence[CourseGroup]) -> list[CoursePayload]:
    """Cap every member of a groupable shared course to the group's optimal size.

    Returns new course records; the inputs are never modified.
    """
    replacements: dict[str, CoursePayload] = {}
    grouped = 0
    for group in groups:
        if not should_group_courses(group):
            continue
        grouped += 1
        optimal = calculate_optimal_class_size(group)
        for course in group.courses:
            tag = f"{GROUPED_WITH_PREFIX}{group.course_code}"
            constraints = course.constraints if tag in course.constraints else [*course.constraints, tag]
            replacements[course.id] = course.model_copy(
                update={"class_size": min(optimal, course.class_size), "constraints": constraints}
            )
    if grouped:
        logger.info("Grouped %s shared courses across departments", grouped)
    return [replacements.get(course.id, course) for course in courses]
