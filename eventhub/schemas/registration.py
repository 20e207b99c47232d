# eventhub/schemas/registration.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from enum import Enum
from datetime import datetime

from eventhub.constants.registration import ActorRole


class RegistrationStatus(str, Enum):
    registered = "registered"
    waitlisted = "waitlisted"
    cancelled = "cancelled"


class RegistrationCreate(BaseModel):
    actor_id: str = Field(..., json_schema_extra={"example": "act_1a2b3c4d5e6f"})
    actor_role: str = Field(..., json_schema_extra={"example": "attendee"})
    # Order matters: sessions are reserved in the order given.
    session_ids: List[str] = Field(default_factory=list)

    @field_validator("actor_role")
    @classmethod
    def check_actor_role(cls, value: str) -> str:
        if not ActorRole.is_valid(value):
            raise ValueError(f"Unknown actor role '{value}'")
        return value


class Registration(BaseModel):
    id: str
    resource_type: str
    resource_id: str
    event_id: str
    actor_id: str
    actor_role: str
    status: RegistrationStatus
    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ReleaseSummary(BaseModel):
    event_id: str
    actor_id: str
    released: int
