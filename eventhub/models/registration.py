# eventhub/models/registration.py
"""
Registration model: one actor's claim on one capacity resource.

A single table covers both event-level and session-level registrations;
`resource_type` tells them apart. The partial unique index guarantees that an
actor holds at most one non-cancelled registration per resource while still
keeping the cancelled history rows.
"""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Index, text
from sqlalchemy.sql import func

from eventhub.db.base_class import Base


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(String, primary_key=True, default=lambda: f"reg_{uuid.uuid4().hex[:12]}")
    resource_type = Column(String(20), nullable=False)  # event, session
    resource_id = Column(String, nullable=False, index=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    actor_id = Column(String, nullable=False, index=True)
    actor_role = Column(String(32), nullable=False)
    status = Column(String(20), nullable=False, server_default="registered", default="registered")  # registered, waitlisted, cancelled
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index(
            "unique_active_registration",
            "resource_type",
            "resource_id",
            "actor_id",
            unique=True,
            postgresql_where=text("status != 'cancelled'"),
            sqlite_where=text("status != 'cancelled'"),
        ),
        Index("idx_registration_actor_event", "actor_id", "event_id"),
    )
