import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import get_settings
from app.schemas.exam import (
    ExamCoursePayload,
    ExamCourseReplaceRequest,
    ExamGenerationResult,
    ExamScheduleItem,
    GenerateExamScheduleRequest,
)
from app.schemas.generator import PublishScheduleRequest, PublishScheduleResponse
from app.services import schedule_store
from app.services.exam_scheduler import generate_exam_schedule

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/exams/courses", response_model=list[ExamCoursePayload])
def list_exam_courses(db: Session = Depends(get_db)) -> list[ExamCoursePayload]:
    return schedule_store.fetch_exam_courses(db)


@router.put("/exams/courses", response_model=list[ExamCoursePayload])
def replace_exam_courses(payload: ExamCourseReplaceRequest, db: Session = Depends(get_db)) -> list[ExamCoursePayload]:
    return schedule_store.replace_exam_courses(db, payload.courses)


@router.post("/exams/generate", response_model=ExamGenerationResult)
def generate_exams(payload: GenerateExamScheduleRequest, db: Session = Depends(get_db)) -> ExamGenerationResult:
    courses = payload.courses if payload.courses is not None else schedule_store.fetch_exam_courses(db)
    venues = payload.venues if payload.venues is not None else schedule_store.fetch_venues(db)
    tolerance = payload.overflow_tolerance
    if tolerance is None:
        tolerance = get_settings().exam_overflow_tolerance

    result = generate_exam_schedule(
        courses,
        venues,
        payload.start_date,
        payload.end_date,
        sessions=payload.sessions,
        overflow_tolerance=tolerance,
    )
    if payload.persist and result.schedule:
        schedule_store.save_exam_schedule(db, result.schedule, published=payload.publish)
    return result


@router.get("/exams/schedule", response_model=list[ExamScheduleItem])
def get_exam_schedule(published_only: bool = False, db: Session = Depends(get_db)) -> list[ExamScheduleItem]:
    return schedule_store.load_exam_schedule(db, published_only=published_only)


@router.post("/exams/schedule/publish", response_model=PublishScheduleResponse)
def publish_exam_schedule(payload: PublishScheduleRequest, db: Session = Depends(get_db)) -> PublishScheduleResponse:
    updated = schedule_store.publish_exam_schedule(db, published=payload.published)
    logger.info("Exam schedule publish state changed | published=%s rows=%s", payload.published, updated)
    return PublishScheduleResponse(published=payload.published, updated=updated)
