# eventhub/services/compatibility.py
"""
Suggested connections for B2B meetings.

Ranks the other actors of the requester's event by how well their offer
meets the requester's need (and the reverse), with industry, region and
language overlap as weaker signals. The ranking is personal: score(a, b)
and score(b, a) generally differ.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from eventhub.core.config import settings
from eventhub.crud import crud_actor
from eventhub.services.actor_profiles import (
    ActorProfileProvider,
    CompositeActorProfileProvider,
    ProfileView,
)
from eventhub.utils.tokens import TokenVector

logger = logging.getLogger(__name__)

# Weights of each overlap in the score
WEIGHT_LOOKING_X_OFFERING = 5
WEIGHT_OFFERING_X_LOOKING = 3
WEIGHT_INDUSTRY = 3
WEIGHT_REGION = 2
WEIGHT_LANGUAGE = 1.5

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def score(me: TokenVector, other: TokenVector) -> float:
    """
    Directional fit of `other` for `me`.

    An `other` whose offering answers what I am looking for weighs most;
    my offering answering their need weighs less.
    """
    return float(
        WEIGHT_LOOKING_X_OFFERING * len(me.looking & other.offering)
        + WEIGHT_OFFERING_X_LOOKING * len(me.offering & other.looking)
        + WEIGHT_INDUSTRY * len(me.industries & other.industries)
        + WEIGHT_REGION * len(me.regions & other.regions)
        + WEIGHT_LANGUAGE * len(me.languages & other.languages)
    )


def clamp_limit(limit: Optional[int]) -> int:
    if not limit:
        return DEFAULT_LIMIT
    return min(MAX_LIMIT, max(1, int(limit)))


@dataclass(frozen=True)
class ScoredProfile:
    profile: ProfileView
    score: float = 0.0

    def ranking_key(self) -> Tuple[float, str, str]:
        return (-self.score, self.profile.sort_name, self.profile.actor_id)

    def alphabetical_key(self) -> Tuple[str, str]:
        return (self.profile.sort_name, self.profile.actor_id)


@dataclass
class SuggestionResult:
    me: ProfileView
    limit: int
    search: Optional[str]
    suggestions: List[ScoredProfile]
    chats: List[ScoredProfile]
    total: int


class CompatibilityScorer:
    """Read-only ranking of candidate actors; holds no state between calls."""

    def __init__(
        self,
        db: Session,
        provider: Optional[ActorProfileProvider] = None,
        require_admin_verified: Optional[bool] = None,
    ):
        self.db = db
        self.provider = provider or CompositeActorProfileProvider(db)
        self.require_admin_verified = (
            settings.SUGGEST_REQUIRE_ADMIN_VERIFIED
            if require_admin_verified is None
            else require_admin_verified
        )

    def suggest(
        self,
        actor_id: str,
        *,
        limit: Optional[int] = DEFAULT_LIMIT,
        name_filter: Optional[str] = None,
        min_results: Optional[int] = None,
    ) -> SuggestionResult:
        limit = clamp_limit(limit)
        search = (name_filter or "").strip() or None
        me = self.provider.resolve(actor_id)

        # Exclusions happen before scoring so they never take up a slot.
        blocked = crud_actor.actor_block.get_blocked_peer_ids(self.db, actor_id=actor_id)
        chatted = crud_actor.conversation.get_direct_peer_ids(self.db, actor_id=actor_id)
        pool = self.provider.candidates(
            me.event_id,
            {actor_id} | blocked,
            require_admin_verified=self.require_admin_verified,
        )
        contacts = [p for p in pool if p.actor_id in chatted]
        strangers = [p for p in pool if p.actor_id not in chatted]

        if search:
            suggestions, chats = self._search(search, strangers, contacts, limit)
        else:
            suggestions, chats = self._rank(
                me, strangers, contacts, limit, min_results or limit
            )

        logger.info(
            f"Suggestions for actor {actor_id}: {len(suggestions)} ranked, "
            f"{len(chats)} in conversation, {len(pool)} scanned",
            extra={"actor_id": actor_id, "event_id": me.event_id, "search": search},
        )
        return SuggestionResult(
            me=me,
            limit=limit,
            search=search,
            suggestions=suggestions,
            chats=chats,
            total=len(pool),
        )

    def _rank(
        self,
        me: ProfileView,
        strangers: List[ProfileView],
        contacts: List[ProfileView],
        limit: int,
        min_results: int,
    ) -> Tuple[List[ScoredProfile], List[ScoredProfile]]:
        my_vector = me.vector()

        scored = sorted(
            (ScoredProfile(p, score(my_vector, p.vector())) for p in strangers),
            key=ScoredProfile.ranking_key,
        )
        primary = [s for s in scored if s.profile.open_to_meetings]
        selected = primary[:limit]

        # Not enough open candidates: top up from the rest, same order
        if len(selected) < min(min_results, limit):
            taken: Set[str] = {s.profile.actor_id for s in selected}
            for candidate in scored:
                if len(selected) >= limit:
                    break
                if candidate.profile.actor_id not in taken:
                    selected.append(candidate)
                    taken.add(candidate.profile.actor_id)

        chats = sorted(
            (ScoredProfile(p, score(my_vector, p.vector())) for p in contacts),
            key=ScoredProfile.ranking_key,
        )
        return selected, chats

    def _search(
        self,
        search: str,
        strangers: List[ProfileView],
        contacts: List[ProfileView],
        limit: int,
    ) -> Tuple[List[ScoredProfile], List[ScoredProfile]]:
        pattern = re.compile(re.escape(search), re.IGNORECASE)

        def matches(profile: ProfileView) -> bool:
            return any(pattern.search(name) for name in profile.name_candidates)

        suggestions = sorted(
            (ScoredProfile(p) for p in strangers if matches(p)),
            key=ScoredProfile.alphabetical_key,
        )[:limit]
        chats = sorted(
            (ScoredProfile(p) for p in contacts if matches(p)),
            key=ScoredProfile.alphabetical_key,
        )
        return suggestions, chats
