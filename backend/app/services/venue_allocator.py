from __future__ import annotations

import math
from dataclasses import dataclass, field
from itertools import groupby
from typing import Sequence

from app.schemas.timetable import CoursePayload, VenuePayload


@dataclass(frozen=True)
class SplitSuggestion:
    groups: int
    suggested_size: int
    venue: VenuePayload


def max_venue_capacity(venues: Sequence[VenuePayload]) -> int:
    return max((venue.capacity for venue in venues), default=0)


def suggest_split(course: CoursePayload, venues: Sequence[VenuePayload]) -> SplitSuggestion | None:
    max_capacity = max_venue_capacity(venues)
    if max_capacity <= 0 or course.class_size <= max_capacity:
        return None
    groups = math.ceil(course.class_size / max_capacity)
    largest = max(venues, key=lambda venue: venue.capacity)
    return SplitSuggestion(
        groups=groups,
        suggested_size=math.ceil(course.class_size / groups),
        venue=largest,
    )


@dataclass
class VenueAllocator:
    """Run-scoped venue picker.

    Exact fits are tried smallest first. Among venues of the same capacity the
    starting point rotates on every call so equal rooms share the load. When
    nothing fits exactly, venues within ``overflow_tolerance`` of the required
    capacity are offered largest first.
    """

    overflow_tolerance: float = 0.0
    _rotation: dict[int, int] = field(default_factory=dict)

    def fits(self, required_capacity: int, venue: VenuePayload) -> bool:
        return venue.capacity >= required_capacity

    def tolerates(self, required_capacity: int, venue: VenuePayload) -> bool:
        if self.overflow_tolerance <= 0:
            return False
        return venue.capacity * (1 + self.overflow_tolerance) >= required_capacity

    def rank(self, required_capacity: int, venues: Sequence[VenuePayload]) -> list[VenuePayload]:
        exact = sorted(
            (venue for venue in venues if self.fits(required_capacity, venue)),
            key=lambda venue: venue.capacity,
        )
        ranked: list[VenuePayload] = []
        for capacity, members in groupby(exact, key=lambda venue: venue.capacity):
            bucket = list(members)
            offset = self._rotation.get(capacity, 0) % len(bucket)
            self._rotation[capacity] = offset + 1
            ranked.extend(bucket[offset:] + bucket[:offset])
        if ranked:
            return ranked

        return sorted(
            (venue for venue in venues if self.tolerates(required_capacity, venue)),
            key=lambda venue: venue.capacity,
            reverse=True,
        )

    def pick(self, required_capacity: int, venues: Sequence[VenuePayload]) -> VenuePayload | None:
        ranked = self.rank(required_capacity, venues)
        return ranked[0] if ranked else None
