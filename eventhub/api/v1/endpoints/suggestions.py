#eventhub/api/v1/endpoints/suggestions.py
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from eventhub.api import deps
from eventhub.core.config import settings
from eventhub.core.limiter import limiter
from eventhub.schemas.suggestion import (
    SuggestedActor,
    SuggestionCount,
    SuggestionCriteria,
    SuggestionRequester,
    SuggestionResponse,
)
from eventhub.services.compatibility import (
    CompatibilityScorer,
    DEFAULT_LIMIT,
    MAX_LIMIT,
    ScoredProfile,
)
from eventhub.utils.validators import validate_actor_id

router = APIRouter(tags=["AI-Powered Networking & Matchmaking"])


def _to_schema(item: ScoredProfile) -> SuggestedActor:
    profile = item.profile
    return SuggestedActor(
        actor_id=profile.actor_id,
        role=profile.role,
        score=item.score,
        name=profile.name,
        email=profile.email,
        country=profile.country,
        avatar=profile.avatar,
        open_to_meetings=profile.open_to_meetings,
    )


@router.get("/actors/{actorId}/suggestions", response_model=SuggestionResponse)
@limiter.limit(settings.SUGGEST_RATE_LIMIT)
def get_suggested_actors(
    actorId: str,
    request: Request,
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    search: Optional[str] = Query(None, max_length=100),
    min_results: Optional[int] = Query(None, alias="min", ge=1, le=MAX_LIMIT),
    scorer: CompatibilityScorer = Depends(deps.get_compatibility_scorer),
):
    """
    Suggested connections for an actor within their event.

    Without `search` candidates are ranked by offer/need fit. With `search`
    the endpoint only matches names and returns them alphabetically with a
    score of 0. Actors already in a conversation with the requester are
    listed under `chats`, never under `suggestions`.
    """
    validate_actor_id(actorId)
    result = scorer.suggest(
        actorId, limit=limit, name_filter=search, min_results=min_results
    )
    suggestions = [_to_schema(item) for item in result.suggestions]
    chats = [_to_schema(item) for item in result.chats]
    return SuggestionResponse(
        me=SuggestionRequester(
            id=result.me.actor_id, role=result.me.role, event_id=result.me.event_id
        ),
        criteria=SuggestionCriteria(limit=result.limit, search=result.search),
        count=SuggestionCount(
            suggestions=len(suggestions), chats=len(chats), total=result.total
        ),
        suggestions=suggestions,
        chats=chats,
    )
