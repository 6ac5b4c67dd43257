"""
Appointment-related enums.
"""

from enum import Enum


class AppointmentStatus(str, Enum):
    """Lifecycle status of an appointment."""

    UPCOMING = "upcoming"
    CHECKED_IN = "checked_in"
    IN_TREATMENT = "in_treatment"
    COMPLETED = "completed"
    NO_SHOW = "no_show"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"

    @classmethod
    def active(cls) -> tuple:
        """Statuses that count towards the one-active-appointment rule."""
        return (cls.UPCOMING, cls.CHECKED_IN)


class ConfirmationStatus(str, Enum):
    """How (and whether) the patient confirmed an appointment."""

    UNCONFIRMED = "unconfirmed"
    MESSAGE_SENT = "message_sent"
    CONFIRMED_WHATSAPP = "confirmed_whatsapp"
    CONFIRMED_CALL = "confirmed_call"
    DOUBLE_CONFIRMED = "double_confirmed"
    CALLED_NO_ANSWER = "called_no_answer"
    CALLED_RESCHEDULE = "called_reschedule"
    CANCELLED = "cancelled"


class FollowupStatus(str, Enum):
    """State of the no-show follow-up sequence."""

    ACTIVE = "active"
    STOPPED = "stopped"
    COMPLETED = "completed"


class BookingField(str, Enum):
    """Booking fields that can be asked for in a follow-up question."""

    NAME = "name"
    PHONE = "phone"
    DATE = "date"
    TIME = "time"
    SERVICE = "service"
    BOOKED_BY = "booked_by"


class BookingIssue(str, Enum):
    """Validation issues found on a parsed booking."""

    INVALID_TIME = "invalid_time"
    INVALID_DATE = "invalid_date"
    PAST_DATE = "past_date"
    INVALID_PHONE = "invalid_phone"
    MISSING_STAFF = "missing_staff"
    DEFAULT_SERVICE = "default_service"

    @property
    def field(self) -> BookingField:
        """The booking field that answers this issue."""
        return _ISSUE_FIELDS[self]


_ISSUE_FIELDS = {
    BookingIssue.INVALID_TIME: BookingField.TIME,
    BookingIssue.INVALID_DATE: BookingField.DATE,
    BookingIssue.PAST_DATE: BookingField.DATE,
    BookingIssue.INVALID_PHONE: BookingField.PHONE,
    BookingIssue.MISSING_STAFF: BookingField.BOOKED_BY,
    BookingIssue.DEFAULT_SERVICE: BookingField.SERVICE,
}


class StaffRole(str, Enum):
    """Staff roles."""

    ADMIN = "admin"
    RECEPTION = "reception"
    NURSE = "nurse"
    DOCTOR = "doctor"

    @classmethod
    def booking_capable(cls) -> tuple:
        return (cls.RECEPTION, cls.ADMIN)


class StaffStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
