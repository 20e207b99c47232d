# eventhub/models/program_room.py
from sqlalchemy import Column, String, Integer, ForeignKey, CheckConstraint, text
from sqlalchemy.orm import relationship
from eventhub.db.base_class import Base
import uuid


class ProgramRoom(Base):
    __tablename__ = "program_rooms"

    id = Column(
        String, primary_key=True, default=lambda: f"room_{uuid.uuid4().hex[:12]}"
    )
    event_id = Column(
        String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String, nullable=False)
    # Sessions held in this room inherit it when they have no capacity of their own
    capacity = Column(Integer, nullable=False, server_default=text("0"), default=0)

    event = relationship("Event", back_populates="rooms")

    __table_args__ = (
        CheckConstraint("capacity >= 0", name="check_room_capacity_positive"),
    )
