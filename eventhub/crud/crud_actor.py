# eventhub/crud/crud_actor.py
from typing import List, Optional, Set

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from .base import CRUDBase
from eventhub.models.actor import Actor
from eventhub.models.actor_block import ActorBlock
from eventhub.models.conversation import Conversation, ConversationMember
from eventhub.schemas.actor import ActorCreate


class CRUDActor(CRUDBase[Actor, ActorCreate, ActorCreate]):
    def get_by_role(self, db: Session, *, actor_id: str, role: str) -> Optional[Actor]:
        return (
            db.query(self.model)
            .filter(and_(self.model.id == actor_id, self.model.role == role))
            .first()
        )

    def get_multi_by_role_and_event(
        self,
        db: Session,
        *,
        role: str,
        event_id: Optional[str],
        exclude_ids: Set[str],
    ) -> List[Actor]:
        """
        Actors of one role attached to an event. A requester without an event
        scans the actors that have none either.
        """
        query = db.query(self.model).filter(self.model.role == role)
        if event_id is None:
            query = query.filter(self.model.event_id.is_(None))
        else:
            query = query.filter(self.model.event_id == event_id)
        if exclude_ids:
            query = query.filter(self.model.id.notin_(list(exclude_ids)))
        return query.order_by(self.model.id.asc()).all()


class CRUDActorBlock:
    def block(self, db: Session, *, blocker_id: str, blocked_id: str) -> ActorBlock:
        existing = db.query(ActorBlock).filter(
            and_(ActorBlock.blocker_id == blocker_id, ActorBlock.blocked_id == blocked_id)
        ).first()
        if existing:
            return existing
        db_obj = ActorBlock(blocker_id=blocker_id, blocked_id=blocked_id)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def unblock(self, db: Session, *, blocker_id: str, blocked_id: str) -> bool:
        deleted = (
            db.query(ActorBlock)
            .filter(
                and_(ActorBlock.blocker_id == blocker_id, ActorBlock.blocked_id == blocked_id)
            )
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted > 0

    def get_blocked_peer_ids(self, db: Session, *, actor_id: str) -> Set[str]:
        """Ids on the other side of a block, whichever side created it."""
        rows = db.query(ActorBlock.blocker_id, ActorBlock.blocked_id).filter(
            or_(ActorBlock.blocker_id == actor_id, ActorBlock.blocked_id == actor_id)
        ).all()
        peers = set()
        for blocker_id, blocked_id in rows:
            peers.add(blocked_id if blocker_id == actor_id else blocker_id)
        return peers


class CRUDConversation:
    def get_direct_peer_ids(self, db: Session, *, actor_id: str) -> Set[str]:
        """Actors sharing an active (non-group, non-archived) conversation with actor_id."""
        my_rooms = (
            select(ConversationMember.conversation_id)
            .join(Conversation, Conversation.id == ConversationMember.conversation_id)
            .where(
                and_(
                    ConversationMember.actor_id == actor_id,
                    Conversation.is_group.is_(False),
                    Conversation.is_archived.is_(False),
                )
            )
        )
        rows = (
            db.query(ConversationMember.actor_id)
            .filter(
                and_(
                    ConversationMember.conversation_id.in_(my_rooms),
                    ConversationMember.actor_id != actor_id,
                )
            )
            .distinct()
            .all()
        )
        return {row[0] for row in rows}


actor = CRUDActor(Actor)
actor_block = CRUDActorBlock()
conversation = CRUDConversation()
