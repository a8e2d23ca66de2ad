from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator, model_validator

WEEKDAYS: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")

DAY_SHORT_MAP = {
    "Mon": "Monday",
    "Tue": "Tuesday",
    "Wed": "Wednesday",
    "Thu": "Thursday",
    "Fri": "Friday",
}

TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$")


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in H:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def normalize_day(value: str) -> str:
    day = value.strip()
    return DAY_SHORT_MAP.get(day, day)


class TimeSlot(BaseModel):
    day: str
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        day = normalize_day(value)
        if day not in WEEKDAYS:
            raise ValueError("Day must be a weekday (Monday to Friday)")
        return day

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        if not TIME_PATTERN.match(value.strip()):
            raise ValueError("Time must be in H:MM 24-hour format")
        return value.strip()

    @model_validator(mode="after")
    def validate_time_order(self) -> "TimeSlot":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("End time must be after start time")
        return self

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def label(self) -> str:
        return f"{self.day} {self.start_time}-{self.end_time}"


class VenuePayload(BaseModel):
    id: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=150)
    capacity: int = Field(ge=1, le=10_000)
    availability: list[TimeSlot] = Field(default_factory=list)

    model_config = {"populate_by_name": True, "frozen": True}


class CoursePayload(BaseModel):
    """A course record as handed to the engine.

    Fields are deliberately permissive (empty strings, zero class size) so that
    incomplete records reach pre-validation and are reported as ``missing_data``
    instead of being rejected at the boundary.
    """

    id: str = Field(min_length=1, max_length=100)
    code: str = Field(default="", max_length=30)
    name: str = Field(default="", max_length=250)
    lecturer: str = Field(default="", max_length=250)
    class_size: int = Field(default=0, alias="classSize", ge=0, le=10_000)
    department: str = Field(default="", max_length=200)
    academic_level: str | None = Field(default=None, alias="academicLevel", max_length=50)
    preferred_slots: list[TimeSlot] | None = Field(default=None, alias="preferredSlots")
    constraints: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("name", "lecturer", "department")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()


class ScheduleItem(CoursePayload):
    venue: VenuePayload
    time_slot: TimeSlot = Field(alias="timeSlot")
    published: bool = False

    @classmethod
    def place(cls, course: CoursePayload, venue: VenuePayload, time_slot: TimeSlot) -> "ScheduleItem":
        return cls(**course.model_dump(), venue=venue, time_slot=time_slot)

    def as_course(self) -> CoursePayload:
        return CoursePayload(**self.model_dump(exclude={"venue", "time_slot", "published"}))
