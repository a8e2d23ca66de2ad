from pydantic import BaseModel, Field, computed_field

from app.schemas.timetable import CoursePayload


class CourseGroup(BaseModel):
    """Courses that normalise to the same base code, across departments."""

    course_code: str = Field(alias="courseCode")
    departments: list[str] = Field(default_factory=list)
    total_students: int = Field(default=0, alias="totalStudents", ge=0)
    courses: list[CoursePayload] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @computed_field(alias="isSharedCourse")
    @property
    def is_shared_course(self) -> bool:
        return len(self.departments) > 1
