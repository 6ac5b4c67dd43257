"""
Duplicate and conflicting booking detection.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ...config import get_settings
from ...core.enums import MessageTag
from ...core.models import Appointment, AppointmentDraft
from ...logging import get_logger
from ...utils.phone import PhoneNumberParser
from ...utils.text import TextProcessor
from ..store import Datastore

logger = get_logger("clinic.conflicts")

YES_REPLIES = {"yes", "y", "yeah", "yep", "ok", "okay", "confirm", "sure"}
NO_REPLIES = {"no", "n", "nope"}


class ConflictDetector:
    """Re-delivery suppression and the one-active-appointment-per-phone rule."""

    def __init__(
        self,
        store: Datastore,
        phones: Optional[PhoneNumberParser] = None,
        window_seconds: Optional[int] = None,
    ):
        settings = get_settings()
        self.store = store
        self.phones = phones or PhoneNumberParser(settings.country_code)
        self.window = timedelta(
            seconds=window_seconds if window_seconds is not None else settings.redelivery_window_seconds
        )

    async def find_redelivery(self, draft: AppointmentDraft, now: datetime) -> Optional[Appointment]:
        """Appointment created from the same booking within the window."""
        found = await self.store.find_recent_duplicate(
            draft.patient_name,
            draft.appointment_date,
            draft.appointment_time,
            self.phones.variants(draft.phone),
            since=now - self.window,
        )
        if found:
            logger.info({"event": "booking_redelivery", "appointment_id": found.id})
        return found

    async def is_redelivered_conflict(self, sender_variants: Sequence[str], text: str, now: datetime) -> bool:
        """The same booking already produced a conflict prompt within the window."""
        found = await self.store.find_recent_inbound(
            sender_variants, MessageTag.BOOKING_CONFLICT, text, since=now - self.window
        )
        return found is not None

    async def find_active_conflict(
        self, phone: str, today: date, exclude_id: Optional[str] = None
    ) -> Optional[Appointment]:
        """Active appointment already held by ``phone``, other than ``exclude_id``."""
        return await self.store.find_active_appointment(
            self.phones.variants(phone), today.isoformat(), exclude_id=exclude_id
        )

    @staticmethod
    def parse_decision(text: str) -> Optional[bool]:
        """True for a bare yes, False for a bare no, None for anything else."""
        reply = TextProcessor.normalize_reply(text)
        if reply in YES_REPLIES:
            return True
        if reply in NO_REPLIES:
            return False
        return None
