# eventhub/services/actor_profiles.py
"""
Actor Profile Provider.

Each participant role stores its profile in a different shape. The role
registry records, per role, the dotted paths that hold each matchable
attribute; the provider turns any stored actor into a uniform ProfileView.
Callers ask the provider to resolve an id and never enumerate roles
themselves.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from eventhub.constants.registration import ActorRole
from eventhub.core.exceptions import NotFound
from eventhub.crud import crud_actor
from eventhub.models.actor import Actor
from eventhub.utils.tokens import TokenVector, as_list

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleFields:
    """Where each matchable attribute lives inside one role's profile document."""

    name: Tuple[str, ...]
    email: Tuple[str, ...] = ()
    country: Tuple[str, ...] = ()
    avatar: Tuple[str, ...] = ()
    languages: Tuple[str, ...] = ()
    industry: Tuple[str, ...] = ()
    offering: Tuple[str, ...] = ()
    looking: Tuple[str, ...] = ()
    regions: Tuple[str, ...] = ()
    open_flag: Tuple[str, ...] = ()
    # Roles whose members only appear to others once an admin approved them
    requires_admin_verification: bool = True


_PERSONAL = dict(
    name=("personal.fullName",),
    email=("personal.email",),
    country=("personal.country",),
    avatar=("personal.profilePic",),
    languages=("personal.preferredLanguages",),
)

ROLE_REGISTRY: Dict[str, RoleFields] = {
    ActorRole.ATTENDEE: RoleFields(
        **_PERSONAL,
        industry=("businessProfile.primaryIndustry",),
        offering=("businessProfile.offering",),
        looking=("matchingIntent.objectives",),
        open_flag=("matchingIntent.openToMeetings",),
    ),
    ActorRole.EXHIBITOR: RoleFields(
        name=("identity.contactName", "identity.exhibitorName"),
        email=("identity.email",),
        country=("identity.country",),
        avatar=("identity.logo",),
        languages=("identity.preferredLanguages",),
        industry=("business.industry",),
        offering=("commercial.offering",),
        looking=("commercial.lookingFor",),
        regions=("commercial.regionInterest",),
        open_flag=("commercial.availableMeetings",),
    ),
    ActorRole.SPEAKER: RoleFields(
        name=("personal.fullName",),
        email=("personal.email",),
        country=("personal.country",),
        avatar=("personal.profilePic",),
        languages=("personal.preferredLanguages", "talk.language"),
        industry=("b2bIntent.businessSector",),
        offering=("b2bIntent.offering",),
        looking=("b2bIntent.lookingFor",),
        regions=("b2bIntent.regionsInterest",),
        open_flag=("b2bIntent.openMeetings",),
        requires_admin_verification=False,
    ),
    ActorRole.BUSINESS_OWNER: RoleFields(
        **_PERSONAL,
        industry=("business.industry", "businessProfile.primaryIndustry"),
        offering=("business.offering", "b2bIntent.offering"),
        looking=("business.lookingFor", "b2bIntent.lookingFor"),
        regions=("business.regionInterest", "b2bIntent.regionsInterest"),
        open_flag=("b2bIntent.openMeetings", "matchingIntent.openToMeetings"),
    ),
    ActorRole.CONSULTANT: RoleFields(
        **_PERSONAL,
        industry=("businessProfile.primaryIndustry", "expertise.industry"),
        offering=("services.offering", "b2bIntent.offering"),
        looking=("services.lookingFor", "b2bIntent.lookingFor"),
        regions=("services.regionInterest", "b2bIntent.regionsInterest"),
        open_flag=("b2bIntent.openMeetings", "matchingIntent.openToMeetings"),
    ),
    ActorRole.EMPLOYEE: RoleFields(
        **_PERSONAL,
        industry=("organization.industry", "businessProfile.primaryIndustry"),
        open_flag=("matchingIntent.openToMeetings", "b2bIntent.openMeetings"),
    ),
    ActorRole.EXPERT: RoleFields(
        **_PERSONAL,
        industry=("expertise.industry", "b2bIntent.businessSector"),
        offering=("b2bIntent.offering",),
        looking=("b2bIntent.lookingFor",),
        regions=("b2bIntent.regionsInterest",),
        open_flag=("b2bIntent.openMeetings",),
    ),
    ActorRole.INVESTOR: RoleFields(
        **_PERSONAL,
        industry=("focus.industry",),
        offering=("capital.offering",),
        looking=("capital.lookingFor",),
        regions=("focus.regions",),
        open_flag=("b2bIntent.openMeetings", "matchingIntent.openToMeetings"),
    ),
    ActorRole.STUDENT: RoleFields(
        **_PERSONAL,
        industry=("study.industry", "businessProfile.primaryIndustry"),
        open_flag=("matchingIntent.openToMeetings",),
    ),
}


def get_path(document: Any, path: str) -> Any:
    """Follow a dotted path through nested dicts; None when any hop is missing."""
    current = document
    for key in path.split("."):
        if not isinstance(current, dict) or current.get(key) is None:
            return None
        current = current[key]
    return current


def pick_first(document: Any, paths: Tuple[str, ...]) -> Any:
    for path in paths:
        value = get_path(document, path)
        if value is not None and value != "":
            return value
    return None


def collect(document: Any, paths: Tuple[str, ...]) -> List[Any]:
    """Values from every path, flattened into one list."""
    values = []
    for path in paths:
        values.extend(as_list(get_path(document, path)))
    return values


def _as_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


@dataclass(frozen=True)
class ProfileView:
    """Normalised, role-independent view of an actor's matchable fields."""

    actor_id: str
    role: str
    event_id: Optional[str]
    name: str
    email: Optional[str] = None
    country: Optional[str] = None
    avatar: Optional[str] = None
    open_to_meetings: bool = False
    admin_verified: bool = False
    looking_for: Tuple[Any, ...] = ()
    offering: Tuple[Any, ...] = ()
    industries: Tuple[Any, ...] = ()
    regions: Tuple[Any, ...] = ()
    languages: Tuple[Any, ...] = ()
    name_candidates: Tuple[str, ...] = field(default=(), repr=False)

    def vector(self) -> TokenVector:
        return TokenVector.from_fields(
            looking_for=list(self.looking_for),
            offering=list(self.offering),
            industries=list(self.industries),
            regions=list(self.regions),
            languages=list(self.languages),
        )

    @property
    def sort_name(self) -> str:
        return self.name.casefold()


def build_profile_view(actor: Actor) -> ProfileView:
    """Project a stored actor through its role's field registry."""
    fields = ROLE_REGISTRY[actor.role]
    document = actor.profile or {}

    name_candidates = tuple(
        str(value)
        for value in (get_path(document, path) for path in fields.name)
        if value not in (None, "")
    )
    open_value = pick_first(document, fields.open_flag)

    return ProfileView(
        actor_id=actor.id,
        role=actor.role,
        event_id=actor.event_id,
        name=name_candidates[0] if name_candidates else "",
        email=pick_first(document, fields.email),
        country=pick_first(document, fields.country),
        avatar=pick_first(document, fields.avatar),
        open_to_meetings=_as_flag(open_value) if open_value is not None else False,
        admin_verified=bool(actor.admin_verified),
        looking_for=tuple(collect(document, fields.looking)),
        offering=tuple(collect(document, fields.offering)),
        industries=tuple(collect(document, fields.industry)),
        regions=tuple(collect(document, fields.regions)),
        languages=tuple(collect(document, fields.languages)),
        name_candidates=name_candidates,
    )


class ActorProfileProvider(ABC):
    """Resolves actors into ProfileViews regardless of the role that stores them."""

    @abstractmethod
    def resolve(self, actor_id: str) -> ProfileView:
        """Return the actor's profile or raise NotFound."""

    @abstractmethod
    def candidates(
        self,
        event_id: Optional[str],
        exclude_ids: Set[str],
        *,
        require_admin_verified: bool = True,
    ) -> List[ProfileView]:
        """Every actor sharing `event_id`, minus `exclude_ids`."""


class RoleProfileSource:
    """Reads the actors of a single role."""

    def __init__(self, db: Session, role: str):
        self.db = db
        self.role = role
        self.fields = ROLE_REGISTRY[role]

    def find(self, actor_id: str) -> Optional[ProfileView]:
        actor = crud_actor.actor.get_by_role(self.db, actor_id=actor_id, role=self.role)
        return build_profile_view(actor) if actor else None

    def list_for_event(
        self,
        event_id: Optional[str],
        exclude_ids: Set[str],
        *,
        require_admin_verified: bool,
    ) -> List[ProfileView]:
        rows = crud_actor.actor.get_multi_by_role_and_event(
            self.db, role=self.role, event_id=event_id, exclude_ids=exclude_ids
        )
        views = [build_profile_view(row) for row in rows]
        if require_admin_verified and self.fields.requires_admin_verification:
            views = [view for view in views if view.admin_verified]
        return views


class CompositeActorProfileProvider(ActorProfileProvider):
    """Tries each role source in registry order."""

    def __init__(self, db: Session, roles: Optional[List[str]] = None):
        self.sources = [
            RoleProfileSource(db, role) for role in (roles or list(ROLE_REGISTRY))
        ]

    def resolve(self, actor_id: str) -> ProfileView:
        for source in self.sources:
            view = source.find(actor_id)
            if view is not None:
                return view
        logger.info(f"Actor {actor_id} not found in any role store")
        raise NotFound(f"Actor {actor_id} not found")

    def candidates(
        self,
        event_id: Optional[str],
        exclude_ids: Set[str],
        *,
        require_admin_verified: bool = True,
    ) -> List[ProfileView]:
        views: List[ProfileView] = []
        for source in self.sources:
            views.extend(
                source.list_for_event(
                    event_id,
                    exclude_ids,
                    require_admin_verified=require_admin_verified,
                )
            )
        return views
