# eventhub/api/deps.py
from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from eventhub.db.session import SessionLocal
from eventhub.services.admission import AdmissionController
from eventhub.services.compatibility import CompatibilityScorer


def get_db() -> Generator:
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_admission_controller(db: Session = Depends(get_db)) -> AdmissionController:
    return AdmissionController(db)


def get_compatibility_scorer(db: Session = Depends(get_db)) -> CompatibilityScorer:
    return CompatibilityScorer(db)
