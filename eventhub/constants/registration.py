# eventhub/constants/registration.py
"""
Constants for registration status values, resource kinds and actor roles.

Provides type-safe constants to replace hardcoded strings throughout the codebase.
"""


class RegistrationStatus:
    """Registration status values."""
    REGISTERED = "registered"
    WAITLISTED = "waitlisted"
    CANCELLED = "cancelled"


class ResourceKind:
    """Kinds of capacity-bounded resources a registration can point at."""
    EVENT = "event"
    SESSION = "session"


class ActorRole:
    """Participant kinds that can hold registrations and be matched."""
    ATTENDEE = "attendee"
    EXHIBITOR = "exhibitor"
    SPEAKER = "speaker"
    BUSINESS_OWNER = "businessOwner"
    CONSULTANT = "consultant"
    EMPLOYEE = "employee"
    EXPERT = "expert"
    INVESTOR = "investor"
    STUDENT = "student"
    ADMIN = "admin"

    @classmethod
    def participant_values(cls) -> list[str]:
        """Roles that carry a matchable actor profile."""
        return [
            cls.ATTENDEE,
            cls.EXHIBITOR,
            cls.SPEAKER,
            cls.BUSINESS_OWNER,
            cls.CONSULTANT,
            cls.EMPLOYEE,
            cls.EXPERT,
            cls.INVESTOR,
            cls.STUDENT,
        ]

    @classmethod
    def all_values(cls) -> list[str]:
        return cls.participant_values() + [cls.ADMIN]

    @classmethod
    def is_valid(cls, role: str) -> bool:
        return role in cls.all_values()
