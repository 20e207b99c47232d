# eventhub/schemas/actor.py
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Optional

from eventhub.constants.registration import ActorRole


class ActorCreate(BaseModel):
    role: str = Field(..., json_schema_extra={"example": "exhibitor"})
    event_id: Optional[str] = None
    admin_verified: bool = False
    # Role-specific document, e.g. {"identity": {...}, "commercial": {...}}
    profile: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("role")
    @classmethod
    def check_role(cls, value: str) -> str:
        if value not in ActorRole.participant_values():
            raise ValueError(f"Unknown actor role '{value}'")
        return value


class Actor(ActorCreate):
    id: str

    model_config = {"from_attributes": True}


class ActorBlock(BaseModel):
    blocker_id: str
    blocked_id: str

    model_config = {"from_attributes": True}
