# eventhub/models/event.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Boolean,
    CheckConstraint,
    func,
    text,
)
from sqlalchemy.orm import relationship
from eventhub.db.base_class import Base
import uuid


class Event(Base):
    """
    Event-level capacity resource.

    `capacity == 0` means unbounded; `reserved_count` is still incremented on
    every successful reservation so organisers can report on it.
    """

    __tablename__ = "events"

    id = Column(
        String, primary_key=True, default=lambda: f"evt_{uuid.uuid4().hex[:12]}"
    )
    organization_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    capacity = Column(Integer, nullable=False, server_default=text("0"), default=0)
    reserved_count = Column(
        Integer, nullable=False, server_default=text("0"), default=0
    )
    is_archived = Column(Boolean, nullable=False, server_default=text("false"), default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    sessions = relationship(
        "Session", back_populates="event", cascade="all, delete-orphan"
    )
    rooms = relationship(
        "ProgramRoom", back_populates="event", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("capacity >= 0", name="check_event_capacity_positive"),
        CheckConstraint("reserved_count >= 0", name="check_event_reserved_positive"),
        CheckConstraint(
            "capacity = 0 OR reserved_count <= capacity",
            name="check_event_reserved_lte_capacity",
        ),
    )
