# eventhub/models/actor.py
from sqlalchemy import Column, String, Boolean, DateTime, JSON, ForeignKey, text, func
from eventhub.db.base_class import Base
import uuid


class Actor(Base):
    """
    A participant of an event.

    Every role keeps its own document shape in `profile` (an exhibitor has
    `identity.*` and `commercial.*`, an investor has `capital.*`, ...). The
    role registry in `eventhub.services.actor_profiles` knows where each
    matchable attribute lives for each role.
    """

    __tablename__ = "actors"

    id = Column(
        String, primary_key=True, default=lambda: f"act_{uuid.uuid4().hex[:12]}"
    )
    role = Column(String(32), nullable=False, index=True)
    event_id = Column(
        String, ForeignKey("events.id", ondelete="CASCADE"), nullable=True, index=True
    )
    admin_verified = Column(Boolean, nullable=False, server_default=text("false"), default=False)
    profile = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
