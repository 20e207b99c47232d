# eventhub/schemas/session.py
from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime


class ProgramRoomCreate(BaseModel):
    name: str = Field(..., json_schema_extra={"example": "Hall A"})
    capacity: int = Field(0, ge=0, json_schema_extra={"example": 120})


class ProgramRoom(ProgramRoomCreate):
    id: str
    event_id: str

    model_config = {"from_attributes": True}


class SessionCreate(BaseModel):
    title: str = Field(..., json_schema_extra={"example": "Keynote"})
    track: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    room_id: Optional[str] = None
    # When omitted (or 0) the session inherits its room's capacity.
    capacity: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_time_range(self):
        if self.start_time and self.end_time and self.end_time < self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class Session(BaseModel):
    id: str
    event_id: str
    title: str
    track: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    room_id: Optional[str] = None
    capacity: int
    reserved_count: int

    model_config = {"from_attributes": True}


class SessionRetired(BaseModel):
    session_id: str
    cancelled_registrations: int
