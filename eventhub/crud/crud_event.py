# eventhub/crud/crud_event.py
from sqlalchemy.orm import Session

from .base import CRUDBase
from eventhub.models.event import Event
from eventhub.schemas.event import EventCreate, CapacityUpdate


class CRUDEvent(CRUDBase[Event, EventCreate, CapacityUpdate]):
    def get_active(self, db: Session, *, event_id: str) -> Event | None:
        """Fetch an event that has not been archived."""
        return (
            db.query(self.model)
            .filter(self.model.id == event_id, self.model.is_archived.is_(False))
            .first()
        )


event = CRUDEvent(Event)
