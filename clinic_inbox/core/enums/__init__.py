"""
Enums for the Clinic Inbox service.
"""

from .appointment import (
    AppointmentStatus,
    ConfirmationStatus,
    FollowupStatus,
    BookingField,
    BookingIssue,
    StaffRole,
    StaffStatus,
)
from .messaging import (
    MessageDirection,
    MessageTag,
    Intent,
    Confidence,
    ClassifierSource,
    RequestType,
    RequestStatus,
)

__all__ = [
    "AppointmentStatus",
    "ConfirmationStatus",
    "FollowupStatus",
    "BookingField",
    "BookingIssue",
    "StaffRole",
    "StaffStatus",
    "MessageDirection",
    "MessageTag",
    "Intent",
    "Confidence",
    "ClassifierSource",
    "RequestType",
    "RequestStatus",
]
