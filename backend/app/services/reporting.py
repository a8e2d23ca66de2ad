from __future__ import annotations

from typing import Sequence

from app.schemas.conflict import SEVERITY_RANK, ConflictGroup, ConflictReport, ConflictType, ScheduleConflict
from app.schemas.generator import GenerationResult, GenerationStatus, GenerationSummary
from app.schemas.timetable import ScheduleItem
from app.schemas.validation import ValidationErrorEntry, ValidationResult, ValidationWarningEntry

CONFLICT_TITLES: dict[str, str] = {
    "lecturer": "Lecturer Conflicts",
    "venue": "Venue Capacity Issues",
    "resource": "Resource Conflicts",
    "cross-departmental": "Cross-Departmental Issues",
}
DEFAULT_CONFLICT_TITLE = "Other Issues"

SOLUTION_STEPS: dict[str, list[str]] = {
    "lecturer": [
        "Review lecturer availability and workload",
        "Consider adjusting time preferences",
        "Split large classes into multiple sessions",
        "Assign alternative lecturers if available",
    ],
    "venue": [
        "Check venue capacity against class sizes",
        "Consider splitting large classes",
        "Request additional venues from administration",
        "Move classes to online format if appropriate",
    ],
    "resource": [
        "Review shared resource scheduling",
        "Coordinate with other departments",
        "Consider alternative resources or equipment",
        "Adjust timing to avoid peak usage",
    ],
}
DEFAULT_SOLUTION_STEPS = [
    "Review course requirements and constraints",
    "Coordinate with other departments",
    "Consider alternative scheduling approaches",
    "Contact academic planning for guidance",
]

# Pre-validation error types surfaced as conflicts when a run is blocked.
VALIDATION_CONFLICT_TYPES: dict[str, ConflictType] = {
    "venue_capacity": "venue",
    "lecturer_overload": "lecturer",
    "missing_data": "resource",
    "cross_level_conflict": "cross-departmental",
}

OUTCOME_MESSAGES: dict[str, str] = {
    "complete": "Schedule generated successfully with no conflicts",
    "partial": "Schedule generated with {conflicts} conflicts requiring attention",
    "failed": "Schedule generation failed: no courses could be scheduled",
}


def conflict_title(conflict_type: str) -> str:
    return CONFLICT_TITLES.get(conflict_type, DEFAULT_CONFLICT_TITLE)


def solution_steps(conflict_type: str) -> list[str]:
    return list(SOLUTION_STEPS.get(conflict_type, DEFAULT_SOLUTION_STEPS))


def group_conflicts_by_type(conflicts: Sequence[ScheduleConflict]) -> list[ConflictGroup]:
    buckets: dict[str, list[ScheduleConflict]] = {}
    for conflict in conflicts:
        buckets.setdefault(conflict.conflict_type, []).append(conflict)

    groups = [
        ConflictGroup(
            conflict_type=conflict_type,
            title=conflict_title(conflict_type),
            highest_severity=min((c.severity for c in members), key=SEVERITY_RANK.__getitem__),
            conflicts=members,
            solution_steps=solution_steps(conflict_type),
        )
        for conflict_type, members in buckets.items()
    ]
    groups.sort(key=lambda group: (SEVERITY_RANK[group.highest_severity], -len(group.conflicts)))
    return groups


def group_validation_errors_by_type(errors: Sequence[ValidationErrorEntry]) -> dict[str, list[ValidationErrorEntry]]:
    grouped: dict[str, list[ValidationErrorEntry]] = {}
    for error in errors:
        grouped.setdefault(error.type, []).append(error)
    return grouped


def group_warnings_by_type(warnings: Sequence[ValidationWarningEntry]) -> dict[str, list[ValidationWarningEntry]]:
    grouped: dict[str, list[ValidationWarningEntry]] = {}
    for warning in warnings:
        grouped.setdefault(warning.type, []).append(warning)
    return grouped


def validation_errors_to_conflicts(errors: Sequence[ValidationErrorEntry]) -> list[ScheduleConflict]:
    conflicts: list[ScheduleConflict] = []
    for error in errors:
        conflict_type = VALIDATION_CONFLICT_TYPES.get(error.type, "resource")
        affected = error.affected_courses or [None]
        for course in affected:
            conflicts.append(
                ScheduleConflict(
                    course=course,
                    reason=error.message,
                    conflict_type=conflict_type,
                    severity=error.severity,
                    suggestion=error.suggestion,
                )
            )
    return conflicts


def build_summary(total_courses: int, scheduled_courses: int) -> GenerationSummary:
    scheduled = min(scheduled_courses, total_courses)
    success_rate = 100 if total_courses == 0 else round(scheduled / total_courses * 100)
    return GenerationSummary(
        total_courses=total_courses,
        scheduled_courses=scheduled,
        conflicted_courses=total_courses - scheduled,
        success_rate=success_rate,
    )


def classify_outcome(
    schedule: Sequence[ScheduleItem],
    conflicts: Sequence[ScheduleConflict],
) -> tuple[bool, GenerationStatus, str]:
    if not conflicts:
        status: GenerationStatus = "complete"
    elif schedule:
        status = "partial"
    else:
        status = "failed"
    message = OUTCOME_MESSAGES[status].format(conflicts=len(conflicts))
    return bool(schedule) or not conflicts, status, message


def build_conflict_report(
    conflicts: Sequence[ScheduleConflict],
    validation: ValidationResult | None = None,
    fallbacks_applied: Sequence[str] | None = None,
) -> ConflictReport:
    errors = validation.errors if validation is not None else []
    warnings = validation.warnings if validation is not None else []
    return ConflictReport(
        total_conflicts=len(conflicts),
        groups=group_conflicts_by_type(conflicts),
        validation_errors_by_type={kind: len(items) for kind, items in group_validation_errors_by_type(errors).items()},
        warnings_by_type={kind: len(items) for kind, items in group_warnings_by_type(warnings).items()},
        fallbacks_applied=list(fallbacks_applied or []),
    )


def report_for_result(result: GenerationResult) -> ConflictReport:
    return build_conflict_report(result.conflicts, result.validation_result, result.fallbacks_applied)
