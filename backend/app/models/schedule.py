import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class ScheduleEntry(Base):
    """One placed course (or course section) of the class timetable.

    Rows are denormalised: split sections and extended-hours venues produced
    during fallback have no row of their own in ``courses`` or ``venues``.
    """

    __tablename__ = "schedules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_id: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    course_code: Mapped[str] = mapped_column(String(30), nullable=False)
    course_name: Mapped[str] = mapped_column(String(250), nullable=False)
    lecturer: Mapped[str] = mapped_column(String(250), index=True, nullable=False)
    department: Mapped[str] = mapped_column(String(200), nullable=False)
    academic_level: Mapped[str | None] = mapped_column(String(50), nullable=True)
    class_size: Mapped[int] = mapped_column(Integer, nullable=False)
    venue_id: Mapped[str] = mapped_column(String(100), nullable=False)
    venue_name: Mapped[str] = mapped_column(String(150), nullable=False)
    venue_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    day: Mapped[str] = mapped_column(String(10), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
