# eventhub/utils/validators.py
"""
Input validation utilities for path and body identifiers.
"""

import re
from typing import List
from fastapi import HTTPException, status

_ID_PATTERNS = {
    "event_id": re.compile(r"^evt_[a-z0-9]{12}$"),
    "session_id": re.compile(r"^ses_[a-z0-9]{12}$"),
    "actor_id": re.compile(r"^act_[a-z0-9]{12}$"),
}


def _validate(name: str, value: str) -> str:
    if not value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{name} is required"
        )
    if not _ID_PATTERNS[name].match(value):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {name} format"
        )
    return value


def validate_event_id(event_id: str) -> str:
    """
    Validate event_id format.

    Expected format: evt_[12 alphanumeric chars]
    """
    return _validate("event_id", event_id)


def validate_session_id(session_id: str) -> str:
    """
    Validate session_id format.

    Expected format: ses_[12 alphanumeric chars]
    Example: ses_abc123xyz789
    """
    return _validate("session_id", session_id)


def validate_actor_id(actor_id: str) -> str:
    return _validate("actor_id", actor_id)


def validate_session_ids(session_ids: List[str]) -> List[str]:
    for session_id in session_ids:
        validate_session_id(session_id)
    return session_ids
