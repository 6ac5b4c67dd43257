"""
Webhook boundary models.

Upstream gateways disagree on field names (``waId`` vs ``senderPhone`` vs
``from``, ``text`` vs ``message`` ...). ``InboundPayload`` reads them with
ordered fallbacks and validates the result before anything enters the typed
domain model.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from pydantic import BaseModel, ConfigDict

from ..exceptions import InvalidPayloadError
from .message import InboundMessage
from .appointment import utc_now

PHONE_KEYS = ("waId", "senderPhone", "from", "phone")
TEXT_KEYS = ("text", "message", "messageText", "body")
NAME_KEYS = ("senderName", "pushName", "name")
TIMESTAMP_KEYS = ("timestamp", "created")


def _first_text(body: Dict[str, Any], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = body.get(key)
        # {"text": {"body": "..."}} style payloads
        if isinstance(value, dict):
            value = value.get("body") or value.get("text")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(int(value))
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(float(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


class InboundPayload(BaseModel):
    """Normalized view of a raw webhook body."""

    model_config = ConfigDict(extra="forbid")

    phone: Optional[str] = None
    text: Optional[str] = None
    sender_name: Optional[str] = None
    timestamp: Optional[datetime] = None

    @classmethod
    def from_body(cls, body: Any) -> "InboundPayload":
        if not isinstance(body, dict):
            raise InvalidPayloadError("Payload must be a JSON object")
        timestamp = None
        for key in TIMESTAMP_KEYS:
            timestamp = _parse_timestamp(body.get(key))
            if timestamp:
                break
        return cls(
            phone=_first_text(body, PHONE_KEYS),
            text=_first_text(body, TEXT_KEYS),
            sender_name=_first_text(body, NAME_KEYS),
            timestamp=timestamp,
        )

    def to_message(self) -> InboundMessage:
        """Validate required fields and build the domain message."""
        if not self.phone or not self.text:
            raise InvalidPayloadError("Missing phone or message")
        return InboundMessage(
            phone=self.phone,
            text=self.text,
            sender_name=self.sender_name,
            received_at=self.timestamp or utc_now(),
        )


class WebhookResponse(BaseModel):
    """JSON envelope returned by every webhook call."""

    success: bool
    intent: Optional[str] = None
    appointment_id: Optional[str] = None
    issues: Optional[List[str]] = None
    error: Optional[str] = None
    duplicate: Optional[bool] = None

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
