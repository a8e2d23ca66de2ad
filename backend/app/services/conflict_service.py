from collections import defaultdict
from typing import Dict, List, Sequence, Set

from app.schemas.conflict import ScheduleConflict
from app.schemas.timetable import ScheduleItem
from app.services.time_grid import overlaps


class ConflictService:
    def __init__(self, items: Sequence[ScheduleItem]):
        self.items: List[ScheduleItem] = list(items)

    def detect_conflicts(self) -> List[ScheduleConflict]:
        conflicts: List[ScheduleConflict] = []

        items_by_day: Dict[str, List[ScheduleItem]] = defaultdict(list)
        for item in self.items:
            items_by_day[item.time_slot.day].append(item)

        for day_items in items_by_day.values():
            n = len(day_items)
            for i in range(n):
                first = day_items[i]

                if first.class_size > first.venue.capacity:
                    conflicts.append(ScheduleConflict(
                        course=first.as_course(),
                        reason=(
                            f"Venue {first.venue.name} capacity ({first.venue.capacity}) "
                            f"< students ({first.class_size})"
                        ),
                        conflict_type="venue",
                        severity="critical",
                        suggestion="Assign alternative venue or reschedule",
                    ))

                for j in range(i + 1, n):
                    second = day_items[j]
                    if not overlaps(first.time_slot, second.time_slot):
                        continue
                    if first.venue.id == second.venue.id:
                        conflicts.append(ScheduleConflict(
                            course=second.as_course(),
                            reason=(
                                f"Venue overlap in {first.venue.name}: {first.code} and {second.code} "
                                f"at {second.time_slot.label()}"
                            ),
                            conflict_type="venue",
                            severity="high",
                            suggestion="Assign alternative venue or reschedule",
                        ))
                    if first.lecturer and first.lecturer == second.lecturer:
                        conflicts.append(ScheduleConflict(
                            course=second.as_course(),
                            reason=(
                                f"Lecturer overlap for {first.lecturer}: {first.code} and {second.code} "
                                f"at {second.time_slot.label()}"
                            ),
                            conflict_type="lecturer",
                            severity="high",
                            suggestion="Reschedule one of the conflicting classes",
                        ))

        return conflicts

    def enforce_exclusivity(self) -> tuple[List[ScheduleItem], List[ScheduleConflict]]:
        """Keep items in order, dropping any that double-book an already kept lecturer or venue."""
        kept: List[ScheduleItem] = []
        dropped: List[ScheduleConflict] = []
        for item in self.items:
            clash = next(
                (
                    other
                    for other in kept
                    if (other.venue.id == item.venue.id or (item.lecturer and other.lecturer == item.lecturer))
                    and overlaps(other.time_slot, item.time_slot)
                ),
                None,
            )
            if clash is None:
                kept.append(item)
                continue
            resource = "venue" if clash.venue.id == item.venue.id else "lecturer"
            dropped.append(ScheduleConflict(
                course=item.as_course(),
                reason=f"{item.code} double-books the {resource} of {clash.code} at {item.time_slot.label()}",
                conflict_type=resource,
                severity="high",
                suggestion=(
                    "Assign alternative venue or reschedule"
                    if resource == "venue"
                    else "Reschedule one of the conflicting classes"
                ),
            ))
        return kept, dropped

    def affected_course_ids(self) -> Set[str]:
        return {conflict.course.id for conflict in self.detect_conflicts() if conflict.course is not None}
