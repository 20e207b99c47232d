# eventhub/crud/crud_registration.py
"""
CRUD operations for registrations.

Inserts rely on the partial unique index (resource, actor) over
non-cancelled rows; callers handle the resulting IntegrityError.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import and_, delete, update
from sqlalchemy.orm import Session

from eventhub.constants.registration import RegistrationStatus, ResourceKind
from eventhub.models.registration import Registration

logger = logging.getLogger(__name__)


class CRUDRegistration:
    """CRUD operations for Registration."""

    def get(self, db: Session, registration_id: str) -> Optional[Registration]:
        return db.query(Registration).filter(Registration.id == registration_id).first()

    def get_active(
        self,
        db: Session,
        *,
        resource_type: str,
        resource_id: str,
        actor_id: str,
    ) -> Optional[Registration]:
        """Get an actor's non-cancelled registration on a resource."""
        return db.query(Registration).filter(
            and_(
                Registration.resource_type == resource_type,
                Registration.resource_id == resource_id,
                Registration.actor_id == actor_id,
                Registration.status != RegistrationStatus.CANCELLED,
            )
        ).first()

    def create_active(
        self,
        db: Session,
        *,
        resource_type: str,
        resource_id: str,
        event_id: str,
        actor_id: str,
        actor_role: str,
    ) -> Registration:
        """
        Insert a registered row and commit.

        Raises IntegrityError (after rolling back) when the actor already holds
        an active registration on the resource.
        """
        registration = Registration(
            resource_type=resource_type,
            resource_id=resource_id,
            event_id=event_id,
            actor_id=actor_id,
            actor_role=actor_role,
            status=RegistrationStatus.REGISTERED,
        )
        db.add(registration)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(registration)
        return registration

    def cancel_active(
        self,
        db: Session,
        *,
        resource_type: str,
        resource_id: str,
        actor_id: str,
    ) -> Optional[str]:
        """
        Flip the active registration to cancelled without committing.

        The status check is part of the UPDATE, so two concurrent cancellations
        cannot both succeed. Returns the cancelled registration id, or None
        when there was nothing to cancel.
        """
        stmt = (
            update(Registration)
            .where(
                and_(
                    Registration.resource_type == resource_type,
                    Registration.resource_id == resource_id,
                    Registration.actor_id == actor_id,
                    Registration.status != RegistrationStatus.CANCELLED,
                )
            )
            .values(
                status=RegistrationStatus.CANCELLED,
                cancelled_at=datetime.now(timezone.utc),
            )
            .returning(Registration.id)
            .execution_options(synchronize_session=False)
        )
        return db.execute(stmt).scalars().first()

    def cancel_all_for_resource(
        self, db: Session, *, resource_type: str, resource_id: str
    ) -> List[str]:
        """Cancel every live registration on a resource (no commit). Returns their ids."""
        stmt = (
            update(Registration)
            .where(
                and_(
                    Registration.resource_type == resource_type,
                    Registration.resource_id == resource_id,
                    Registration.status != RegistrationStatus.CANCELLED,
                )
            )
            .values(
                status=RegistrationStatus.CANCELLED,
                cancelled_at=datetime.now(timezone.utc),
            )
            .returning(Registration.id)
            .execution_options(synchronize_session=False)
        )
        return list(db.execute(stmt).scalars().all())

    def delete(self, db: Session, registration_id: str, *, commit: bool = True) -> bool:
        """Hard-delete a registration row (used when undoing a partial registration)."""
        result = db.execute(
            delete(Registration)
            .where(Registration.id == registration_id)
            .execution_options(synchronize_session=False)
        )
        if commit:
            db.commit()
        return result.rowcount > 0

    def get_active_by_actor(
        self,
        db: Session,
        *,
        actor_id: str,
        event_id: Optional[str] = None,
    ) -> List[Registration]:
        """All non-cancelled registrations of an actor, event rows first."""
        query = db.query(Registration).filter(
            and_(
                Registration.actor_id == actor_id,
                Registration.status != RegistrationStatus.CANCELLED,
            )
        )
        if event_id:
            query = query.filter(Registration.event_id == event_id)
        registrations = query.order_by(Registration.created_at.asc()).all()
        # Event-level registration leads, then sessions in booking order
        return sorted(
            registrations,
            key=lambda r: 0 if r.resource_type == ResourceKind.EVENT else 1,
        )

    def count_active_by_resource(
        self, db: Session, *, resource_type: str, resource_id: str
    ) -> int:
        """Count active registrations for a resource (used for reconciliation checks)."""
        return db.query(Registration).filter(
            and_(
                Registration.resource_type == resource_type,
                Registration.resource_id == resource_id,
                Registration.status == RegistrationStatus.REGISTERED,
            )
        ).count()


# Singleton instance
registration = CRUDRegistration()
