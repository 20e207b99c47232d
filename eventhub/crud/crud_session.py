# eventhub/crud/crud_session.py
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from .base import CRUDBase
from eventhub.models.program_room import ProgramRoom
from eventhub.models.session import Session as SessionModel
from eventhub.schemas.session import ProgramRoomCreate, SessionCreate


class CRUDProgramRoom(CRUDBase[ProgramRoom, ProgramRoomCreate, ProgramRoomCreate]):
    def create_for_event(
        self, db: Session, *, obj_in: ProgramRoomCreate, event_id: str
    ) -> ProgramRoom:
        db_obj = self.model(**obj_in.model_dump(), event_id=event_id)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


class CRUDSession(CRUDBase[SessionModel, SessionCreate, SessionCreate]):
    def create_with_event(
        self, db: Session, *, obj_in: SessionCreate, event_id: str
    ) -> SessionModel:
        """
        Creates a session under an event.

        A session without its own positive capacity takes the capacity of its
        room; without a room it stays unbounded (0).
        """
        session_data = obj_in.model_dump(exclude={"capacity"})
        capacity = obj_in.capacity or 0

        if capacity == 0 and obj_in.room_id:
            room = db.query(ProgramRoom).filter(ProgramRoom.id == obj_in.room_id).first()
            if room is not None:
                capacity = room.capacity

        db_obj = self.model(**session_data, event_id=event_id, capacity=capacity)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_multi_by_event(
        self, db: Session, *, event_id: str, include_archived: bool = False
    ) -> List[SessionModel]:
        query = (
            db.query(self.model)
            .options(joinedload(self.model.room))
            .filter(self.model.event_id == event_id)
        )
        if not include_archived:
            query = query.filter(self.model.is_archived.is_(False))
        return query.order_by(self.model.start_time.asc(), self.model.title.asc()).all()

    def get_room(self, db: Session, *, room_id: str) -> Optional[ProgramRoom]:
        return db.query(ProgramRoom).filter(ProgramRoom.id == room_id).first()


session = CRUDSession(SessionModel)
program_room = CRUDProgramRoom(ProgramRoom)
