"""
Booking message parser.

Staff send bookings as loosely formatted WhatsApp messages, e.g.::

    *Appointment Confirmation*
    Name : Aisha Khan
    Phone : 0501234567
    Date : Wednesday, 18th February 2026
    Time : 3pm
    Service : Hydrafacial
    Booked by Sara
"""

import re
from datetime import date
from typing import Optional, Sequence

from ...config import get_settings
from ...core.enums import BookingField
from ...core.models import AppointmentDraft, ParsedBooking
from ...utils.names import StaffNameMatcher
from ...utils.text import FieldExtractor, NOTES
from ...utils.validation import BookingValidator

_BOOKING_KEYWORD_RE = re.compile(r"appointment|booking", re.IGNORECASE)


class BookingMessageParser:
    """Turn a booking message into an appointment draft plus its issues."""

    def __init__(
        self,
        validator: Optional[BookingValidator] = None,
        matcher: Optional[StaffNameMatcher] = None,
        default_service: Optional[str] = None,
    ):
        self.matcher = matcher or StaffNameMatcher()
        self.validator = validator or BookingValidator(matcher=self.matcher)
        self.default_service = default_service or get_settings().default_service
        self.extractor = FieldExtractor()

    @staticmethod
    def is_booking_message(text: str) -> bool:
        return bool(_BOOKING_KEYWORD_RE.search(text or ""))

    def parse(self, text: str, directory: Sequence[str], today: date) -> Optional[ParsedBooking]:
        """
        Parse a booking message.

        Args:
            text: Raw message text
            directory: Booking-capable staff names, in directory order
            today: Current date in the clinic's time zone

        Returns:
            ParsedBooking, or None when the message carries no labeled name
        """
        fields = self.extractor.extract(text)
        patient_name = fields.get(BookingField.NAME)
        if not patient_name:
            return None

        raw_date = fields.get(BookingField.DATE)
        raw_time = fields.get(BookingField.TIME)
        service = fields.get(BookingField.SERVICE)
        raw_booked_by = fields.get(BookingField.BOOKED_BY)

        if raw_booked_by:
            booked_by = self.matcher.match(raw_booked_by, directory)
        else:
            lines = [line for line in fields.free_lines if not self.extractor.is_header(line)]
            booked_by = self.matcher.find_in_lines(lines, directory)

        draft = AppointmentDraft(
            patient_name=patient_name,
            phone=fields.get(BookingField.PHONE) or "",
            appointment_date=self.validator.dates.normalize(raw_date, today) if raw_date else None,
            appointment_time=self.validator.times.normalize(raw_time) if raw_time else None,
            service=service or self.default_service,
            booked_by=booked_by,
            special_instructions=fields.get(NOTES),
            raw_date=raw_date,
            raw_time=raw_time,
            raw_booked_by=raw_booked_by,
        )
        issues = self.validator.evaluate(draft, today, default_service_used=not service)
        return ParsedBooking(draft=draft, issues=issues)

    def parse_booking(self, text: str, directory: Sequence[str], today: date) -> Optional[ParsedBooking]:
        """Parse only if the text reads as a booking (keyword plus labeled name)."""
        if not self.is_booking_message(text):
            return None
        return self.parse(text, directory, today)
