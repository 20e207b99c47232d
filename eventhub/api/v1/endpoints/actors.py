#eventhub/api/v1/endpoints/actors.py
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from eventhub.api import deps
from eventhub.crud import crud_actor, crud_event
from eventhub.schemas.actor import Actor, ActorBlock, ActorCreate
from eventhub.utils.validators import validate_actor_id

router = APIRouter(tags=["Actors"])


def _get_actor_or_404(db: Session, actor_id: str):
    validate_actor_id(actor_id)
    actor = crud_actor.actor.get(db, actor_id)
    if not actor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Actor not found"
        )
    return actor


@router.post("/actors", response_model=Actor, status_code=status.HTTP_201_CREATED)
def create_actor(actor_in: ActorCreate, db: Session = Depends(deps.get_db)):
    """
    Create a participant. `profile` keeps the role's own document shape.
    """
    if actor_in.event_id and not crud_event.event.get_active(db, event_id=actor_in.event_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Event not found"
        )
    return crud_actor.actor.create(db, obj_in=actor_in)


@router.post(
    "/actors/{actorId}/blocks/{peerId}",
    response_model=ActorBlock,
    status_code=status.HTTP_201_CREATED,
)
def block_actor(actorId: str, peerId: str, db: Session = Depends(deps.get_db)):
    """
    Block a peer. Blocked actors never show up in each other's suggestions.
    Blocking twice is a no-op.
    """
    _get_actor_or_404(db, actorId)
    validate_actor_id(peerId)
    if peerId == actorId:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot block yourself"
        )
    return crud_actor.actor_block.block(db, blocker_id=actorId, blocked_id=peerId)


@router.delete(
    "/actors/{actorId}/blocks/{peerId}", status_code=status.HTTP_204_NO_CONTENT
)
def unblock_actor(actorId: str, peerId: str, db: Session = Depends(deps.get_db)):
    _get_actor_or_404(db, actorId)
    validate_actor_id(peerId)
    crud_actor.actor_block.unblock(db, blocker_id=actorId, blocked_id=peerId)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
