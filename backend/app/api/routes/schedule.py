import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.conflict import ConflictReport
from app.schemas.generator import (
    GenerateScheduleRequest,
    GenerationResult,
    PublishScheduleRequest,
    PublishScheduleResponse,
    ValidateScheduleRequest,
)
from app.schemas.grouping import CourseGroup
from app.schemas.timetable import ScheduleItem
from app.schemas.validation import ValidationResult
from app.services import schedule_store
from app.services.course_grouping import identify_shared_courses
from app.services.generation_service import default_policy, generate_for_request
from app.services.pre_validation import perform_pre_generation_validation
from app.services.reporting import report_for_result

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/schedule/validate", response_model=ValidationResult)
def validate_schedule_inputs(payload: ValidateScheduleRequest, db: Session = Depends(get_db)) -> ValidationResult:
    courses = payload.courses if payload.courses is not None else schedule_store.fetch_courses(db)
    venues = payload.venues if payload.venues is not None else schedule_store.fetch_venues(db)
    return perform_pre_generation_validation(courses, venues, payload.policy or default_policy())


@router.post("/schedule/groups", response_model=list[CourseGroup])
def analyse_course_groups(payload: ValidateScheduleRequest, db: Session = Depends(get_db)) -> list[CourseGroup]:
    courses = payload.courses if payload.courses is not None else schedule_store.fetch_courses(db)
    return identify_shared_courses(courses)


@router.post("/schedule/generate", response_model=GenerationResult)
def generate_schedule(payload: GenerateScheduleRequest, db: Session = Depends(get_db)) -> GenerationResult:
    return generate_for_request(db, payload)


@router.post("/schedule/report", response_model=ConflictReport)
def build_schedule_report(payload: GenerationResult) -> ConflictReport:
    return report_for_result(payload)


@router.get("/schedule", response_model=list[ScheduleItem])
def get_schedule(published_only: bool = False, db: Session = Depends(get_db)) -> list[ScheduleItem]:
    return schedule_store.load_schedule(db, published_only=published_only)


@router.post("/schedule/publish", response_model=PublishScheduleResponse)
def publish_schedule(payload: PublishScheduleRequest, db: Session = Depends(get_db)) -> PublishScheduleResponse:
    updated = schedule_store.publish_schedule(db, published=payload.published)
    logger.info("Schedule publish state changed | published=%s rows=%s", payload.published, updated)
    return PublishScheduleResponse(published=payload.published, updated=updated)
