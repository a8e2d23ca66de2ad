from app.models.course import Course  # noqa: F401
from app.models.exam import ExamCourse, ExamScheduleEntry  # noqa: F401
from app.models.schedule import ScheduleEntry  # noqa: F401
from app.models.venue import Venue  # noqa: F401
