# eventhub/models/actor_block.py
from sqlalchemy import Column, String, DateTime, UniqueConstraint, func
from eventhub.db.base_class import Base
import uuid


class ActorBlock(Base):
    __tablename__ = "actor_blocks"

    id = Column(
        String, primary_key=True, default=lambda: f"blk_{uuid.uuid4().hex[:12]}"
    )
    blocker_id = Column(String, nullable=False, index=True)
    blocked_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("blocker_id", "blocked_id", name="unique_actor_block"),
    )
