# eventhub/schemas/event.py
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class EventBase(BaseModel):
    name: str = Field(..., json_schema_extra={"example": "Global Trade Summit"})
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    capacity: int = Field(
        0,
        ge=0,
        description="Maximum number of registrants. 0 means unbounded.",
        json_schema_extra={"example": 500},
    )


class EventCreate(EventBase):
    organization_id: str = Field(..., json_schema_extra={"example": "org_abc"})


class Event(EventBase):
    id: str
    organization_id: str
    reserved_count: int
    is_archived: bool

    model_config = {"from_attributes": True}


class CapacityUpdate(BaseModel):
    capacity: int = Field(..., ge=0, json_schema_extra={"example": 250})


class SeatInfo(BaseModel):
    capacity: int
    taken: int
    # None when the resource is unbounded
    remaining: Optional[int] = None


class SessionSeats(BaseModel):
    session_id: str
    title: str
    room_name: Optional[str] = None
    seats: SeatInfo


class EventSeats(BaseModel):
    event_id: str
    seats: SeatInfo
    sessions: List[SessionSeats]
