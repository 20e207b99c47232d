# eventhub/schemas/suggestion.py
from pydantic import BaseModel, Field
from typing import List, Optional


class SuggestedActor(BaseModel):
    actor_id: str
    role: str
    score: float = Field(..., ge=0, json_schema_extra={"example": 8.0})
    name: str
    email: Optional[str] = None
    country: Optional[str] = None
    avatar: Optional[str] = None
    open_to_meetings: bool = False

    model_config = {"from_attributes": True}


class SuggestionRequester(BaseModel):
    id: str
    role: str
    event_id: Optional[str] = None


class SuggestionCriteria(BaseModel):
    limit: int
    search: Optional[str] = None


class SuggestionCount(BaseModel):
    suggestions: int
    chats: int
    total: int


class SuggestionResponse(BaseModel):
    success: bool = True
    me: SuggestionRequester
    criteria: SuggestionCriteria
    count: SuggestionCount
    suggestions: List[SuggestedActor]
    chats: List[SuggestedActor]
