#eventhub/models/session.py
from sqlalchemy import (
    Column,
    String,
    Integer,
    DateTime,
    Boolean,
    ForeignKey,
    CheckConstraint,
    text,
)
from sqlalchemy.orm import relationship
from eventhub.db.base_class import Base
import uuid


class Session(Base):
    __tablename__ = "sessions"

    id = Column(
        String, primary_key=True, default=lambda: f"ses_{uuid.uuid4().hex[:12]}"
    )
    event_id = Column(
        String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    room_id = Column(
        String, ForeignKey("program_rooms.id", ondelete="SET NULL"), nullable=True
    )
    title = Column(String, nullable=False)
    track = Column(String, nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    is_archived = Column(Boolean, nullable=False, server_default=text("false"), default=False)

    # Capacity is copied from the room at creation time so the
    # compare-and-increment only ever touches this row.
    capacity = Column(Integer, nullable=False, server_default=text("0"), default=0)
    reserved_count = Column(
        Integer, nullable=False, server_default=text("0"), default=0
    )

    # Relationships
    event = relationship("Event", back_populates="sessions")
    room = relationship("ProgramRoom")

    __table_args__ = (
        CheckConstraint("capacity >= 0", name="check_session_capacity_positive"),
        CheckConstraint("reserved_count >= 0", name="check_session_reserved_positive"),
        CheckConstraint(
            "capacity = 0 OR reserved_count <= capacity",
            name="check_session_reserved_lte_capacity",
        ),
    )
