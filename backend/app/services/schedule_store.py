from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import PersistenceError
from app.models.course import Course
from app.models.exam import ExamCourse, ExamScheduleEntry
from app.models.schedule import ScheduleEntry
from app.models.venue import Venue
from app.schemas.exam import ExamCoursePayload, ExamScheduleItem
from app.schemas.timetable import WEEKDAYS, CoursePayload, ScheduleItem, TimeSlot, VenuePayload

logger = logging.getLogger(__name__)


def course_to_payload(course: Course) -> CoursePayload:
    return CoursePayload(
        id=course.id,
        code=course.code,
        name=course.name,
        lecturer=course.lecturer,
        class_size=course.class_size,
        department=course.department,
        academic_level=course.academic_level,
        preferred_slots=[TimeSlot.model_validate(slot) for slot in course.preferred_slots or []] or None,
        constraints=list(course.constraints or []),
    )


def venue_to_payload(venue: Venue) -> VenuePayload:
    return VenuePayload(
        id=venue.id,
        name=venue.name,
        capacity=venue.capacity,
        availability=[TimeSlot.model_validate(slot) for slot in venue.availability or []],
    )


def fetch_courses(db: Session) -> list[CoursePayload]:
    try:
        rows = db.execute(select(Course).order_by(Course.code, Course.department)).scalars().all()
    except SQLAlchemyError as exc:
        logger.exception("Failed to load courses")
        raise PersistenceError("Could not load courses from the store") from exc
    return [course_to_payload(row) for row in rows]


def fetch_venues(db: Session) -> list[VenuePayload]:
    try:
        rows = db.execute(select(Venue).order_by(Venue.name)).scalars().all()
    except SQLAlchemyError as exc:
        logger.exception("Failed to load venues")
        raise PersistenceError("Could not load venues from the store") from exc
    return [venue_to_payload(row) for row in rows]


def fetch_exam_courses(db: Session) -> list[ExamCoursePayload]:
    try:
        rows = db.execute(select(ExamCourse).order_by(ExamCourse.course_code, ExamCourse.department)).scalars().all()
    except SQLAlchemyError as exc:
        logger.exception("Failed to load exam courses")
        raise PersistenceError("Could not load exam courses from the store") from exc
    return [ExamCoursePayload.model_validate(row) for row in rows]


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise PersistenceError(f"Could not {action}") from exc


def save_schedule(db: Session, items: Sequence[ScheduleItem], published: bool = False) -> int:
    """Replace the stored class timetable with ``items``."""
    db.execute(delete(ScheduleEntry))
    db.add_all(
        ScheduleEntry(
            course_id=item.id,
            course_code=item.code,
            course_name=item.name,
            lecturer=item.lecturer,
            department=item.department,
            academic_level=item.academic_level,
            class_size=item.class_size,
            venue_id=item.venue.id,
            venue_name=item.venue.name,
            venue_capacity=item.venue.capacity,
            day=item.time_slot.day,
            start_time=item.time_slot.start_time,
            end_time=item.time_slot.end_time,
            published=published,
        )
        for item in items
    )
    _commit(db, "save the schedule")
    logger.info("Saved schedule | items=%s published=%s", len(items), published)
    return len(items)


def load_schedule(db: Session, published_only: bool = False) -> list[ScheduleItem]:
    query = select(ScheduleEntry)
    if published_only:
        query = query.where(ScheduleEntry.published.is_(True))
    rows = db.execute(query).scalars().all()
    items = [
        ScheduleItem(
            id=row.course_id,
            code=row.course_code,
            name=row.course_name,
            lecturer=row.lecturer,
            class_size=row.class_size,
            department=row.department,
            academic_level=row.academic_level,
            venue=VenuePayload(id=row.venue_id, name=row.venue_name, capacity=row.venue_capacity),
            time_slot=TimeSlot(day=row.day, start_time=row.start_time, end_time=row.end_time),
            published=row.published,
        )
        for row in rows
    ]
    items.sort(key=lambda item: (WEEKDAYS.index(item.time_slot.day), item.time_slot.start_minutes, item.venue.name))
    return items


def publish_schedule(db: Session, published: bool = True) -> int:
    result = db.execute(update(ScheduleEntry).values(published=published))
    _commit(db, "publish the schedule")
    return result.rowcount or 0


def replace_exam_courses(db: Session, courses: Sequence[ExamCoursePayload]) -> list[ExamCoursePayload]:
    db.execute(delete(ExamCourse))
    rows = [
        ExamCourse(
            course_code=course.course_code,
            course_title=course.course_title,
            department=course.department,
            college=course.college,
            level=course.level,
            student_count=course.student_count,
        )
        for course in courses
    ]
    db.add_all(rows)
    _commit(db, "replace exam courses")
    for row in rows:
        db.refresh(row)
    return [ExamCoursePayload.model_validate(row) for row in rows]


def save_exam_schedule(db: Session, items: Sequence[ExamScheduleItem], published: bool = False) -> int:
    db.execute(delete(ExamScheduleEntry))
    db.add_all(
        ExamScheduleEntry(
            exam_course_id=item.exam_course_id,
            course_code=item.course_code,
            course_title=item.course_title,
            department=item.department,
            college=item.college,
            level=item.level,
            student_count=item.student_count,
            shared_departments=list(item.shared_departments),
            day=item.day.isoformat(),
            session_name=item.session,
            start_time=item.start_time,
            end_time=item.end_time,
            venue_name=item.venue_name,
            published=published,
        )
        for item in items
    )
    _commit(db, "save the exam schedule")
    logger.info("Saved exam schedule | items=%s published=%s", len(items), published)
    return len(items)


def load_exam_schedule(db: Session, published_only: bool = False) -> list[ExamScheduleItem]:
    query = select(ExamScheduleEntry).order_by(ExamScheduleEntry.day, ExamScheduleEntry.start_time)
    if published_only:
        query = query.where(ExamScheduleEntry.published.is_(True))
    rows = db.execute(query).scalars().all()
    return [
        ExamScheduleItem(
            exam_course_id=row.exam_course_id,
            course_code=row.course_code,
            course_title=row.course_title,
            department=row.department,
            college=row.college,
            level=row.level,
            student_count=row.student_count,
            shared_departments=list(row.shared_departments or []),
            day=date.fromisoformat(row.day),
            session=row.session_name,
            start_time=row.start_time,
            end_time=row.end_time,
            venue_name=row.venue_name,
            published=row.published,
        )
        for row in rows
    ]


def publish_exam_schedule(db: Session, published: bool = True) -> int:
    result = db.execute(update(ExamScheduleEntry).values(published=published))
    _commit(db, "publish the exam schedule")
    return result.rowcount or 0
