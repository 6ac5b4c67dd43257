"""
Core data models for the Clinic Inbox service.
"""

from .appointment import Appointment, AppointmentDraft, ParsedBooking, utc_now
from .message import InboundMessage, MessageLogEntry, PendingRequest
from .staff import StaffMember, directory_names
from .classification import ClassificationResult
from .webhook import InboundPayload, WebhookResponse

__all__ = [
    "Appointment",
    "AppointmentDraft",
    "ParsedBooking",
    "utc_now",
    "InboundMessage",
    "MessageLogEntry",
    "PendingRequest",
    "StaffMember",
    "directory_names",
    "ClassificationResult",
    "InboundPayload",
    "WebhookResponse",
]
