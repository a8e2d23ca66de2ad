import re

from pydantic import BaseModel, Field, field_validator

from app.schemas.timetable import TimeSlot

COURSE_CODE_PATTERN = re.compile(r"^[A-Z]{2,4}\d{3,4}$")


def normalize_course_code(value: str) -> str:
    code = re.sub(r"\s+", "", value).upper()
    if not COURSE_CODE_PATTERN.match(code):
        raise ValueError("Course code must be 2-4 letters followed by 3-4 digits (e.g. CSC101)")
    return code


class CourseBase(BaseModel):
    code: str = Field(min_length=5, max_length=20)
    name: str = Field(min_length=1, max_length=200)
    lecturer: str = Field(min_length=1, max_length=200)
    class_size: int = Field(ge=1, le=10_000)
    department: str = Field(min_length=1, max_length=200)
    academic_level: str | None = Field(default=None, max_length=50)
    preferred_slots: list[TimeSlot] = Field(default_factory=list, max_length=20)
    constraints: list[str] = Field(default_factory=list, max_length=20)

    @field_validator("code")
    @classmethod
    def validate_code(cls, value: str) -> str:
        return normalize_course_code(value)

    @field_validator("name", "lecturer", "department")
    @classmethod
    def strip_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Value cannot be blank")
        return stripped


class CourseCreate(CourseBase):
    pass


class CourseBulkCreate(BaseModel):
    courses: list[CourseCreate] = Field(min_length=1, max_length=2000)


class CourseUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=5, max_length=20)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    lecturer: str | None = Field(default=None, min_length=1, max_length=200)
    class_size: int | None = Field(default=None, ge=1, le=10_000)
    department: str | None = Field(default=None, min_length=1, max_length=200)
    academic_level: str | None = Field(default=None, max_length=50)
    preferred_slots: list[TimeSlot] | None = Field(default=None, max_length=20)
    constraints: list[str] | None = Field(default=None, max_length=20)

    @field_validator("code")
    @classmethod
    def validate_code(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return normalize_course_code(value)


class CourseOut(CourseBase):
    id: str

    model_config = {"from_attributes": True}
