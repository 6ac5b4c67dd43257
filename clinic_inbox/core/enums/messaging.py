"""
Messaging and intent enums.
"""

from enum import Enum


class MessageDirection(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class MessageTag(str, Enum):
    """Sentinel tags attached to logged messages."""

    AWAITING_ANSWER = "awaiting_answer"
    BOOKING_CONFLICT = "booking_conflict"
    BOOKING_CONFLICT_ASK = "booking_conflict_ask"


class Intent(str, Enum):
    """Patient intent regarding an existing appointment."""

    CONFIRM = "confirm"
    RESCHEDULE = "reschedule"
    CANCEL = "cancel"
    INQUIRY = "inquiry"
    UNCLEAR = "unclear"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ClassifierSource(str, Enum):
    """Which classifier produced a result."""

    AI = "ai"
    KEYWORDS = "keywords"


class RequestType(str, Enum):
    """Type of request handed to staff for manual handling."""

    RESCHEDULE = "reschedule"
    CANCELLATION = "cancellation"
    INQUIRY = "inquiry"
    UNCLEAR = "unclear"

    @classmethod
    def from_intent(cls, intent: Intent) -> "RequestType":
        """Map a classified intent to the request staff must handle."""
        if intent == Intent.RESCHEDULE:
            return cls.RESCHEDULE
        if intent == Intent.CANCEL:
            return cls.CANCELLATION
        if intent == Intent.INQUIRY:
            return cls.INQUIRY
        return cls.UNCLEAR


class RequestStatus(str, Enum):
    PENDING = "pending"
    HANDLED = "handled"
