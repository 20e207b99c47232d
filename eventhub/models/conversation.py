# eventhub/models/conversation.py
from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    text,
    func,
)
from sqlalchemy.orm import relationship
from eventhub.db.base_class import Base
import uuid


class Conversation(Base):
    """Chat room header. Only direct (non-group) rooms count as contacts."""

    __tablename__ = "conversations"

    id = Column(
        String, primary_key=True, default=lambda: f"conv_{uuid.uuid4().hex[:12]}"
    )
    is_group = Column(Boolean, nullable=False, server_default=text("false"), default=False)
    is_archived = Column(Boolean, nullable=False, server_default=text("false"), default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    members = relationship(
        "ConversationMember",
        back_populates="conversation",
        cascade="all, delete-orphan",
    )


class ConversationMember(Base):
    __tablename__ = "conversation_members"

    conversation_id = Column(
        String,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        primary_key=True,
    )
    actor_id = Column(String, primary_key=True, index=True)

    conversation = relationship("Conversation", back_populates="members")
