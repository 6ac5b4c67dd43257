"""
Messaging data models.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict

from ..enums import (
    MessageDirection,
    MessageTag,
    Intent,
    Confidence,
    BookingField,
    RequestType,
    RequestStatus,
)
from .appointment import utc_now, _new_id


class InboundMessage(BaseModel):
    """A single inbound WhatsApp message, after payload normalization."""

    model_config = ConfigDict(extra="forbid")

    phone: str
    text: str
    sender_name: Optional[str] = None
    received_at: datetime = Field(default_factory=utc_now)


class MessageLogEntry(BaseModel):
    """Append-only record of a message sent or received."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    phone: str
    patient_name: Optional[str] = None
    direction: MessageDirection
    text: str
    linked_appointment_id: Optional[str] = None
    classified_intent: Optional[Intent] = None
    confidence: Optional[Confidence] = None
    tag: Optional[MessageTag] = None
    awaiting_fields: List[BookingField] = Field(default_factory=list)
    reply_to_id: Optional[int] = None
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def is_outbound(self) -> bool:
        return self.direction == MessageDirection.OUTBOUND


class PendingRequest(BaseModel):
    """A message the webhook could not safely act on; handled by staff."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=_new_id)
    appointment_id: Optional[str] = None
    phone: str
    patient_name: str
    request_type: RequestType
    original_message: str
    classifier_output: Dict[str, Any] = Field(default_factory=dict)
    confidence: Optional[Confidence] = None
    suggested_reply: Optional[str] = None
    needs_human_review: bool = True
    status: RequestStatus = RequestStatus.PENDING
    created_at: datetime = Field(default_factory=utc_now)
