import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.models.course import Course
from app.schemas.course import CourseBase, CourseBulkCreate, CourseCreate, CourseOut, CourseUpdate

router = APIRouter()

logger = logging.getLogger(__name__)


def _find_duplicate(db: Session, code: str, department: str, exclude_id: str | None = None) -> Course | None:
    query = select(Course).where(Course.code == code, Course.department == department)
    if exclude_id is not None:
        query = query.where(Course.id != exclude_id)
    return db.execute(query).scalar_one_or_none()


@router.get("/", response_model=list[CourseOut])
def list_courses(department: str | None = None, db: Session = Depends(get_db)) -> list[CourseOut]:
    query = select(Course).order_by(Course.code, Course.department)
    if department:
        query = query.where(Course.department == department)
    return list(db.execute(query).scalars())


@router.post("/", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(payload: CourseCreate, db: Session = Depends(get_db)) -> CourseOut:
    if _find_duplicate(db, payload.code, payload.department):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Course code already exists for this department")
    course = Course(**payload.model_dump(mode="json"))
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@router.post("/bulk", response_model=list[CourseOut], status_code=status.HTTP_201_CREATED)
def create_courses_bulk(payload: CourseBulkCreate, db: Session = Depends(get_db)) -> list[CourseOut]:
    seen: set[tuple[str, str]] = set()
    for item in payload.courses:
        key = (item.code, item.department)
        if key in seen or _find_duplicate(db, item.code, item.department):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Course {item.code} already exists for {item.department}",
            )
        seen.add(key)

    courses = [Course(**item.model_dump(mode="json")) for item in payload.courses]
    db.add_all(courses)
    db.commit()
    for course in courses:
        db.refresh(course)
    logger.info("Bulk created %s courses", len(courses))
    return courses


@router.put("/{course_id}", response_model=CourseOut)
def update_course(course_id: str, payload: CourseUpdate, db: Session = Depends(get_db)) -> CourseOut:
    course = db.get(Course, course_id)
    if course is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")

    data = payload.model_dump(mode="json", exclude_unset=True)
    if data:
        merged = {
            "code": data.get("code", course.code),
            "name": data.get("name", course.name),
            "lecturer": data.get("lecturer", course.lecturer),
            "class_size": data.get("class_size", course.class_size),
            "department": data.get("department", course.department),
            "academic_level": data.get("academic_level", course.academic_level),
            "preferred_slots": data.get("preferred_slots", course.preferred_slots),
            "constraints": data.get("constraints", course.constraints),
        }
        try:
            normalized = CourseBase.model_validate(merged).model_dump(mode="json")
        except ValidationError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.errors(include_context=False)) from exc
        if _find_duplicate(db, normalized["code"], normalized["department"], exclude_id=course_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Course code already exists for this department",
            )
        for key, value in normalized.items():
            setattr(course, key, value)

    db.commit()
    db.refresh(course)
    return course


@router.delete("/{course_id}")
def delete_course(course_id: str, db: Session = Depends(get_db)) -> dict:
    course = db.get(Course, course_id)
    if course is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    db.delete(course)
    db.commit()
    return {"success": True}
