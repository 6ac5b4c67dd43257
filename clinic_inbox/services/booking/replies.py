"""
Outbound reply texts for the booking flow.
"""

from typing import List, Sequence

from ...core.enums import BookingIssue
from ...core.models import Appointment, AppointmentDraft
from ...utils.validation import BookingValidator

# Untagged log entries carrying either phrase are read back as open questions
QUESTION_MARKERS = ("please reply", "issues found")


def describe_draft(draft: AppointmentDraft) -> str:
    when = " at ".join(p for p in (draft.appointment_date, draft.appointment_time) if p)
    return f"{draft.patient_name} on {when or 'an unknown date'} for {draft.service}"


def issues_reply(
    appointment: Appointment,
    issues: Sequence[BookingIssue],
    validator: BookingValidator,
    directory: Sequence[str],
    rejected: Sequence[str] = (),
) -> str:
    """Ask for the fields that are still missing or invalid."""
    lines: List[str] = []
    if rejected:
        lines.append("Some answers could not be used:")
        lines.extend(f"• {reason}" for reason in rejected)
        lines.append("")
    lines.append(f"Booking saved for {appointment.describe()}, but issues found:")
    lines.extend(f"• {validator.describe_issue(issue, directory)}" for issue in issues)
    lines.append("")
    lines.append("Please reply with the missing details.")
    return "\n".join(lines)


def completion_reply(appointment: Appointment) -> str:
    booked_by = f" Booked by {appointment.booked_by}." if appointment.booked_by else ""
    return f"✅ Appointment confirmed: {appointment.describe()}.{booked_by}"


def conflict_prompt(existing: Appointment, draft: AppointmentDraft) -> str:
    return "\n".join(
        [
            f"⚠️ {existing.patient_name} already has an active appointment.",
            f"Existing: {existing.describe()}",
            f"New: {describe_draft(draft)}",
            "",
            "Reply YES to cancel the existing appointment and book the new one, or NO to keep it.",
        ]
    )


def conflict_kept_reply(existing: Appointment) -> str:
    return f"OK, no changes made. The existing appointment stays: {existing.describe()}."


def conflict_expired_reply() -> str:
    return "The booking you answered could not be found any more. Please send the booking again."
