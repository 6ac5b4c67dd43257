"""
Appointment-related data models.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4
from pydantic import BaseModel, Field, ConfigDict

from ..enums import (
    AppointmentStatus,
    ConfirmationStatus,
    BookingField,
    BookingIssue,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


class AppointmentDraft(BaseModel):
    """Appointment fields parsed from a booking message, not yet stored."""

    model_config = ConfigDict(extra="forbid")

    patient_name: str
    phone: str = ""
    appointment_date: Optional[str] = None  # YYYY-MM-DD format
    appointment_time: Optional[str] = None  # HH:MM format
    service: str
    booked_by: Optional[str] = None
    special_instructions: Optional[str] = None

    # Raw text as written, kept for error messages
    raw_date: Optional[str] = None
    raw_time: Optional[str] = None
    raw_booked_by: Optional[str] = None


class Appointment(BaseModel):
    """Stored appointment."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=_new_id)
    patient_name: str
    phone: str
    appointment_date: Optional[str] = None
    appointment_time: Optional[str] = None
    service: str
    booked_by: Optional[str] = None
    status: AppointmentStatus = AppointmentStatus.UPCOMING
    confirmation_status: ConfirmationStatus = ConfirmationStatus.UNCONFIRMED
    special_instructions: Optional[str] = None
    followup_status: Optional[str] = None
    no_show_count: int = 0
    is_new_patient: bool = False
    last_reply: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    rescheduled_from: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    @classmethod
    def from_draft(cls, draft: AppointmentDraft, is_new_patient: bool = False, **extra) -> "Appointment":
        """Create a new upcoming, unconfirmed appointment from a parsed draft."""
        return cls(
            patient_name=draft.patient_name,
            phone=draft.phone,
            appointment_date=draft.appointment_date,
            appointment_time=draft.appointment_time,
            service=draft.service,
            booked_by=draft.booked_by,
            special_instructions=draft.special_instructions,
            is_new_patient=is_new_patient,
            **extra,
        )

    def is_active_on(self, today: str) -> bool:
        """Active = upcoming or checked in, dated today or later."""
        return (
            self.status in AppointmentStatus.active()
            and self.appointment_date is not None
            and self.appointment_date >= today
        )

    def describe(self) -> str:
        """One-line human description used in replies and classifier context."""
        when = " at ".join(p for p in (self.appointment_date, self.appointment_time) if p)
        return f"{self.patient_name} on {when or 'an unknown date'} for {self.service}"


@dataclass
class ParsedBooking:
    """Result of parsing a booking message."""

    draft: AppointmentDraft
    issues: List[BookingIssue] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.issues

    @property
    def pending_fields(self) -> List[BookingField]:
        """Fields to ask for, in issue order, without duplicates."""
        fields: List[BookingField] = []
        for issue in self.issues:
            if issue.field not in fields:
                fields.append(issue.field)
        return fields
