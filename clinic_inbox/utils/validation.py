"""
Validation utilities for booking fields.
"""

import re
from datetime import date
from typing import List, Optional, Sequence, Tuple

from ..config import get_settings
from ..core.enums import BookingIssue
from ..core.models import AppointmentDraft
from .date import DateNormalizer, TimeNormalizer
from .names import StaffNameMatcher

ISSUE_MESSAGES = {
    BookingIssue.INVALID_TIME: "Please provide a valid time between {open} and {close}",
    BookingIssue.INVALID_DATE: "Please provide a valid date",
    BookingIssue.PAST_DATE: "The date is in the past, please provide a future date",
    BookingIssue.INVALID_PHONE: "Please provide a valid phone number",
    BookingIssue.MISSING_STAFF: "Please specify who booked this appointment ({staff})",
    BookingIssue.DEFAULT_SERVICE: "Please specify the service (defaulted to {service})",
}


class BookingValidator:
    """Booking validation rules shared by the parser and the answer resolver."""

    def __init__(
        self,
        clinic_open: Optional[str] = None,
        clinic_close: Optional[str] = None,
        min_phone_digits: Optional[int] = None,
        default_service: Optional[str] = None,
        timezone: Optional[str] = None,
        matcher: Optional[StaffNameMatcher] = None,
    ):
        settings = get_settings()
        self.clinic_open = clinic_open or settings.clinic_open
        self.clinic_close = clinic_close or settings.clinic_close
        self.min_phone_digits = min_phone_digits or settings.min_phone_digits
        self.default_service = default_service or settings.default_service
        self.dates = DateNormalizer(timezone or settings.timezone)
        self.times = TimeNormalizer()
        self.matcher = matcher or StaffNameMatcher()

    def is_within_hours(self, time_str: Optional[str]) -> bool:
        """Clinic hours are inclusive on both ends."""
        if not time_str:
            return False
        return self.clinic_open <= time_str <= self.clinic_close

    def is_valid_phone(self, phone: Optional[str]) -> bool:
        return len(re.sub(r"\D", "", phone or "")) >= self.min_phone_digits

    @staticmethod
    def is_past(date_str: Optional[str], today: date) -> bool:
        return bool(date_str) and date_str < today.isoformat()

    def evaluate(self, draft: AppointmentDraft, today: date, default_service_used: bool) -> List[BookingIssue]:
        """
        Collect the issues of a draft.

        Each issue is independent; a draft can carry all of them at once.
        """
        issues: List[BookingIssue] = []
        if not draft.appointment_time or not self.is_within_hours(draft.appointment_time):
            issues.append(BookingIssue.INVALID_TIME)
        if not draft.appointment_date:
            issues.append(BookingIssue.INVALID_DATE)
        elif self.is_past(draft.appointment_date, today):
            issues.append(BookingIssue.PAST_DATE)
        if not self.is_valid_phone(draft.phone):
            issues.append(BookingIssue.INVALID_PHONE)
        if not draft.booked_by:
            issues.append(BookingIssue.MISSING_STAFF)
        if default_service_used:
            issues.append(BookingIssue.DEFAULT_SERVICE)
        return issues

    # Single-answer validators: (is_valid, normalized_value, error_message)

    def validate_time(self, raw: str) -> Tuple[bool, Optional[str], Optional[str]]:
        value = self.times.normalize(raw)
        if not value:
            return False, None, f"'{raw}' is not a valid time"
        if not self.is_within_hours(value):
            return False, None, (
                f"{value} is outside clinic hours ({self.clinic_open} to {self.clinic_close})"
            )
        return True, value, None

    def validate_date(self, raw: str, today: date) -> Tuple[bool, Optional[str], Optional[str]]:
        value = self.dates.normalize(raw, today)
        if not value:
            return False, None, f"'{raw}' is not a valid date"
        if self.is_past(value, today):
            return False, None, f"{value} is in the past"
        return True, value, None

    def validate_phone(self, raw: str) -> Tuple[bool, Optional[str], Optional[str]]:
        if not self.is_valid_phone(raw):
            return False, None, f"'{raw}' is not a valid phone number"
        return True, raw.strip(), None

    def validate_staff(self, raw: str, directory: Sequence[str]) -> Tuple[bool, Optional[str], Optional[str]]:
        value = self.matcher.match(raw, directory)
        if not value:
            names = ", ".join(directory) or "no staff on file"
            return False, None, f"'{raw}' does not match any staff member ({names})"
        return True, value, None

    @staticmethod
    def validate_service(raw: str) -> Tuple[bool, Optional[str], Optional[str]]:
        value = (raw or "").strip()
        if not value:
            return False, None, "Service cannot be empty"
        return True, value, None

    def describe_issue(self, issue: BookingIssue, directory: Sequence[str]) -> str:
        """Human-readable correction request for one issue."""
        return ISSUE_MESSAGES[issue].format(
            open=self.clinic_open,
            close=self.clinic_close,
            staff=", ".join(directory) or "no staff on file",
            service=self.default_service,
        )
