from pydantic import BaseModel, Field

from app.schemas.timetable import TimeSlot


class VenueBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    capacity: int = Field(ge=1, le=10_000)
    availability: list[TimeSlot] = Field(default_factory=list, max_length=100)


class VenueCreate(VenueBase):
    pass


class VenueUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    capacity: int | None = Field(default=None, ge=1, le=10_000)
    availability: list[TimeSlot] | None = Field(default=None, max_length=100)


class VenueOut(VenueBase):
    id: str

    model_config = {"from_attributes": True}
