from fastapi import APIRouter

from app.schemas.conflict import ScheduleAuditRequest, ScheduleAuditResponse
from app.services.conflict_service import ConflictService
from app.services.reporting import build_conflict_report

router = APIRouter()


@router.post("/detect", response_model=ScheduleAuditResponse)
def detect_conflicts(payload: ScheduleAuditRequest) -> ScheduleAuditResponse:
    service = ConflictService(payload.schedule)
    conflicts = service.detect_conflicts()
    return ScheduleAuditResponse(
        conflicts=conflicts,
        report=build_conflict_report(conflicts),
        affected_course_ids=sorted(service.affected_course_ids()),
    )
