from __future__ import annotations

import logging
from typing import Any, Sequence

from pydantic import ValidationError

from app.schemas.conflict import ScheduleConflict
from app.schemas.timetable import CoursePayload, ScheduleItem, VenuePayload
from app.services.time_grid import is_business_hours

logger = logging.getLogger(__name__)

# Course fields a placement must carry unchanged from the submitted record.
COURSE_IDENTITY_FIELDS = ("code", "name", "lecturer", "class_size", "department", "academic_level")


def _rejection(course: CoursePayload | None, reason: str) -> ScheduleConflict:
    return ScheduleConflict(
        course=course,
        reason=reason,
        conflict_type="system-error",
        severity="high",
        suggestion="Regenerate the schedule or place this course manually",
    )


def _describe(raw: Any) -> str:
    if isinstance(raw, dict):
        return str(raw.get("code") or raw.get("id") or "unknown item")
    return "unknown item"


def _changed_fields(item: ScheduleItem, course: CoursePayload) -> list[str]:
    return [name for name in COURSE_IDENTITY_FIELDS if getattr(item, name) != getattr(course, name)]


def _venue_mismatch(item: ScheduleItem, venues: dict[str, VenuePayload]) -> str | None:
    known = venues.get(item.venue.id)
    if known is None:
        return f"Placement of {item.code} uses unknown venue {item.venue.name or item.venue.id}"
    if (item.venue.name, item.venue.capacity) != (known.name, known.capacity):
        return (
            f"Placement of {item.code} describes venue {known.name} as "
            f"{item.venue.name} with {item.venue.capacity} seats"
        )
    return None


def conform_schedule(
    raw_items: Sequence[Any],
    courses: Sequence[CoursePayload] | None = None,
    venues: Sequence[VenuePayload] | None = None,
) -> tuple[list[ScheduleItem], list[ScheduleConflict]]:
    """Structurally verify schedule records before they reach callers.

    Each record must parse as a ScheduleItem. When ``courses`` is given it must
    refer to a known course and carry that course's fields unchanged; when
    ``venues`` is given its venue must be one of them as submitted. It must
    also appear once, sit inside business hours and fit its venue. Anything
    else is dropped, logged and reported as a conflict.
    """
    known = {course.id: course for course in courses} if courses is not None else None
    pool = {venue.id: venue for venue in venues} if venues is not None else None
    accepted: list[ScheduleItem] = []
    rejected: list[ScheduleConflict] = []
    seen: set[str] = set()

    for raw in raw_items:
        try:
            item = raw if isinstance(raw, ScheduleItem) else ScheduleItem.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Rejected malformed schedule item %s: %s", _describe(raw), exc.errors()[:3])
            rejected.append(_rejection(None, f"Malformed schedule item {_describe(raw)} was rejected"))
            continue

        course = known.get(item.id) if known is not None else item.as_course()
        if known is not None and course is None:
            logger.warning("Rejected schedule item for unknown course id=%s", item.id)
            rejected.append(_rejection(None, f"Schedule item for unknown course {item.code or item.id} was rejected"))
            continue
        changed = _changed_fields(item, course)
        if changed:
            logger.warning("Rejected schedule item %s with altered fields: %s", course.code, ", ".join(changed))
            rejected.append(
                _rejection(course, f"Placement of {course.code} altered course fields: {', '.join(changed)}")
            )
            continue
        if pool is not None:
            mismatch = _venue_mismatch(item, pool)
            if mismatch is not None:
                logger.warning("Rejected schedule item %s: venue id=%s does not match", item.code, item.venue.id)
                rejected.append(_rejection(course, mismatch))
                continue
        if item.id in seen:
            logger.warning("Rejected duplicate schedule item for course id=%s", item.id)
            rejected.append(_rejection(course, f"Duplicate placement of {item.code} was rejected"))
            continue
        if not is_business_hours(item.time_slot):
            logger.warning("Rejected out-of-hours schedule item %s at %s", item.code, item.time_slot.label())
            rejected.append(
                _rejection(course, f"Placement of {item.code} at {item.time_slot.label()} is outside business hours")
            )
            continue
        if item.class_size > item.venue.capacity:
            logger.warning(
                "Rejected over-capacity schedule item %s: %s students in %s (%s seats)",
                item.code,
                item.class_size,
                item.venue.name,
                item.venue.capacity,
            )
            rejected.append(
                _rejection(
                    course,
                    f"Placement of {item.code} in {item.venue.name} exceeds capacity "
                    f"({item.class_size} > {item.venue.capacity})",
                )
            )
            continue

        seen.add(item.id)
        accepted.append(item)

    return accepted, rejected
