# eventhub/crud/crud_capacity.py
import logging
from typing import List, Optional

from sqlalchemy import and_, or_, update
from sqlalchemy.orm import Session

from eventhub.models.event import Event
from eventhub.models.session import Session as SessionModel

logger = logging.getLogger(__name__)


class CRUDCapacity:
    """
    Counter operations for a capacity-bounded table (events or sessions).

    Every mutation is a single conditional UPDATE so the capacity check and
    the write happen in one statement; nothing here reads a counter and then
    writes it back.
    """

    def __init__(self, model):
        self.model = model

    def get(self, db: Session, resource_id: str):
        return db.query(self.model).filter(self.model.id == resource_id).first()

    def get_many(self, db: Session, resource_ids: List[str]) -> list:
        if not resource_ids:
            return []
        return db.query(self.model).filter(self.model.id.in_(resource_ids)).all()

    def increment_if_available(self, db: Session, resource_id: str) -> Optional[int]:
        """
        Atomically take one seat.

        Returns the post-increment count, or None when the resource is full
        (or does not exist). Unbounded resources (capacity 0) always succeed.
        The change is committed immediately to keep the row lock short.
        """
        stmt = (
            update(self.model)
            .where(
                and_(
                    self.model.id == resource_id,
                    self.model.is_archived.is_(False),
                    or_(
                        self.model.capacity == 0,
                        self.model.reserved_count < self.model.capacity,
                    ),
                )
            )
            .values(reserved_count=self.model.reserved_count + 1)
            .returning(self.model.reserved_count)
            .execution_options(synchronize_session=False)
        )
        try:
            new_count = db.execute(stmt).scalar_one_or_none()
            db.commit()
        except Exception:
            db.rollback()
            raise
        return new_count

    def decrement(self, db: Session, resource_id: str, *, commit: bool = True) -> bool:
        """
        Give one seat back, floored at zero.

        Returns True when a seat was actually released. With commit=False the
        caller owns the transaction.
        """
        stmt = (
            update(self.model)
            .where(
                and_(
                    self.model.id == resource_id,
                    self.model.reserved_count > 0,
                )
            )
            .values(reserved_count=self.model.reserved_count - 1)
            .execution_options(synchronize_session=False)
        )
        result = db.execute(stmt)
        if commit:
            db.commit()
        return result.rowcount > 0

    def update_capacity(
        self, db: Session, resource_id: str, new_capacity: int
    ) -> Optional[int]:
        """
        Change the maximum capacity.

        Returns None if the new capacity is below the seats already taken.
        0 (unbounded) is always accepted.
        """
        condition = self.model.id == resource_id
        if new_capacity > 0:
            condition = and_(condition, self.model.reserved_count <= new_capacity)

        stmt = (
            update(self.model)
            .where(condition)
            .values(capacity=new_capacity)
            .returning(self.model.capacity)
            .execution_options(synchronize_session=False)
        )
        updated = db.execute(stmt).scalar_one_or_none()
        db.commit()
        if updated is None:
            logger.info(
                f"Capacity update to {new_capacity} refused for {self.model.__tablename__} {resource_id}"
            )
        return updated

    def archive(self, db: Session, resource_id: str) -> bool:
        """
        Soft-delete the resource and zero its counter, without committing.

        Returns False when the resource is missing or already archived.
        """
        stmt = (
            update(self.model)
            .where(
                and_(
                    self.model.id == resource_id,
                    self.model.is_archived.is_(False),
                )
            )
            .values(is_archived=True, reserved_count=0)
            .execution_options(synchronize_session=False)
        )
        return db.execute(stmt).rowcount > 0

    def seat_info(self, resource) -> dict:
        """Capacity, taken and remaining seats (remaining is None when unbounded)."""
        remaining = (
            max(0, resource.capacity - resource.reserved_count)
            if resource.capacity > 0
            else None
        )
        return {
            "capacity": resource.capacity,
            "taken": resource.reserved_count,
            "remaining": remaining,
        }


# Singleton instances
event_capacity = CRUDCapacity(Event)
session_capacity = CRUDCapacity(SessionModel)
