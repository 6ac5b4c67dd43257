"""
Conversation state resolver.

There is no session object: whether an inbound message answers an earlier
question is inferred from the most recent outbound entry in the message log.
Questions are tagged ``awaiting_answer`` with the fields they wait for.
Older untagged questions are recognized by their wording.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence

from ...core.enums import BookingField, BookingIssue, MessageTag
from ...core.exceptions import ConversationStateError
from ...core.models import Appointment, AppointmentDraft, MessageLogEntry
from ...logging import get_logger
from ...utils.text import FieldExtractor
from ...utils.validation import BookingValidator
from ..booking.conflicts import ConflictDetector
from ..booking.replies import QUESTION_MARKERS
from ..store import Datastore

logger = get_logger("clinic.conversation")

FIELD_COLUMNS = {
    BookingField.NAME: "patient_name",
    BookingField.PHONE: "phone",
    BookingField.DATE: "appointment_date",
    BookingField.TIME: "appointment_time",
    BookingField.SERVICE: "service",
    BookingField.BOOKED_BY: "booked_by",
}

# Wording of issue lines in untagged questions, mapped to the field asked for
LEGACY_FIELD_PHRASES = (
    ("valid time", BookingField.TIME),
    ("clinic hours", BookingField.TIME),
    ("valid date", BookingField.DATE),
    ("future date", BookingField.DATE),
    ("in the past", BookingField.DATE),
    ("phone number", BookingField.PHONE),
    ("who booked", BookingField.BOOKED_BY),
    ("booked by", BookingField.BOOKED_BY),
    ("staff", BookingField.BOOKED_BY),
    ("service", BookingField.SERVICE),
)

_PHONE_LINE_RE = re.compile(r"^\+?[\d\s\-().]+$")
_BOOKED_BY_PREFIX_RE = re.compile(r"^(?:booked\s+by|by)\s+", re.IGNORECASE)


@dataclass
class PendingQuestion:
    """An outbound question still waiting for an answer."""

    message: MessageLogEntry
    fields: List[BookingField]

    @property
    def appointment_id(self) -> Optional[str]:
        return self.message.linked_appointment_id


@dataclass
class AnswerCheck:
    """Validated answers: normalized values and rejection reasons per field."""

    accepted: Dict[BookingField, str] = field(default_factory=dict)
    rejected: Dict[BookingField, str] = field(default_factory=dict)


@dataclass
class Resolution:
    """Outcome of applying a reply to the appointment it answers."""

    appointment: Appointment
    remaining: List[BookingIssue]
    rejected: List[str] = field(default_factory=list)
    answered: bool = True

    @property
    def is_complete(self) -> bool:
        return not self.remaining

    @property
    def pending_fields(self) -> List[BookingField]:
        fields: List[BookingField] = []
        for issue in self.remaining:
            if issue.field not in fields:
                fields.append(issue.field)
        return fields


class ConversationStateResolver:
    """Match replies to open booking questions and apply the answers."""

    def __init__(
        self,
        store: Datastore,
        validator: Optional[BookingValidator] = None,
        conflicts: Optional[ConflictDetector] = None,
    ):
        self.store = store
        self.validator = validator or BookingValidator()
        self.conflicts = conflicts or ConflictDetector(store)
        self.extractor = FieldExtractor()

    @staticmethod
    def fields_from_text(text: str) -> List[BookingField]:
        """Pending fields of an untagged question, derived from its wording."""
        lowered = (text or "").lower()
        if not any(marker in lowered for marker in QUESTION_MARKERS):
            return []
        fields: List[BookingField] = []
        for phrase, booking_field in LEGACY_FIELD_PHRASES:
            if phrase in lowered and booking_field not in fields:
                fields.append(booking_field)
        return fields

    @classmethod
    def question_from_entry(cls, entry: Optional[MessageLogEntry]) -> Optional[PendingQuestion]:
        if entry is None or not entry.is_outbound:
            return None
        if entry.tag == MessageTag.AWAITING_ANSWER:
            return PendingQuestion(message=entry, fields=list(entry.awaiting_fields))
        if entry.tag is None:
            fields = cls.fields_from_text(entry.text)
            if fields:
                return PendingQuestion(message=entry, fields=fields)
        return None

    async def pending_question(self, phone_variants: Sequence[str]) -> Optional[PendingQuestion]:
        """Question asked by the most recent outbound message, if any."""
        return self.question_from_entry(await self.store.last_outbound(phone_variants))

    def parse_answers(
        self,
        reply: str,
        pending: Sequence[BookingField],
        directory: Sequence[str],
        today: date,
    ) -> Dict[BookingField, str]:
        """
        Split a reply into raw answers for the pending fields.

        A single-line reply to a single-field question is that field's
        value. Otherwise labeled lines are read first and the remaining
        lines are tried against time, date, phone, staff and service in
        that order.
        """
        lines = self.extractor.lines(reply)
        if not lines or not pending:
            return {}

        if len(pending) == 1 and len(lines) == 1:
            only = pending[0]
            labeled = self.extractor.match_label(lines[0])
            if labeled and labeled[0] == only.value:
                return {only: labeled[1]}
            return {only: lines[0]}

        answers: Dict[BookingField, str] = {}
        leftovers: List[str] = []
        for line in lines:
            labeled = self.extractor.match_label(line)
            if labeled:
                name, value = labeled
                if name in (f.value for f in pending):
                    answers.setdefault(BookingField(name), value)
                    continue
            leftovers.append(line)

        def wanted(booking_field: BookingField) -> bool:
            return booking_field in pending and booking_field not in answers

        for line in leftovers:
            if wanted(BookingField.TIME) and self.validator.times.normalize(line):
                answers[BookingField.TIME] = line
            elif wanted(BookingField.DATE) and self.validator.dates.normalize(line, today, natural=False):
                answers[BookingField.DATE] = line
            elif wanted(BookingField.PHONE) and _PHONE_LINE_RE.match(line) and self.validator.is_valid_phone(line):
                answers[BookingField.PHONE] = line
            elif wanted(BookingField.BOOKED_BY) and self.validator.matcher.match(
                _BOOKED_BY_PREFIX_RE.sub("", line), directory
            ):
                answers[BookingField.BOOKED_BY] = _BOOKED_BY_PREFIX_RE.sub("", line)
            elif wanted(BookingField.SERVICE):
                answers[BookingField.SERVICE] = line
        return answers

    def validate_answers(
        self,
        answers: Dict[BookingField, str],
        directory: Sequence[str],
        today: date,
    ) -> AnswerCheck:
        """Re-validate each answer with the booking rules."""
        check = AnswerCheck()
        for booking_field, raw in answers.items():
            if booking_field == BookingField.TIME:
                ok, value, error = self.validator.validate_time(raw)
            elif booking_field == BookingField.DATE:
                ok, value, error = self.validator.validate_date(raw, today)
            elif booking_field == BookingField.PHONE:
                ok, value, error = self.validator.validate_phone(raw)
            elif booking_field == BookingField.BOOKED_BY:
                ok, value, error = self.validator.validate_staff(_BOOKED_BY_PREFIX_RE.sub("", raw), directory)
            elif booking_field == BookingField.SERVICE:
                ok, value, error = self.validator.validate_service(raw)
            else:
                value = raw.strip()
                ok, error = bool(value), "Name cannot be empty"
            if ok:
                check.accepted[booking_field] = value
            else:
                check.rejected[booking_field] = error
        return check

    def remaining_issues(
        self,
        appointment: Appointment,
        pending: Sequence[BookingField],
        accepted: Dict[BookingField, str],
        today: date,
    ) -> List[BookingIssue]:
        """Issues left on the appointment once accepted answers are applied."""
        draft = AppointmentDraft(
            patient_name=appointment.patient_name,
            phone=appointment.phone,
            appointment_date=appointment.appointment_date,
            appointment_time=appointment.appointment_time,
            service=appointment.service,
            booked_by=appointment.booked_by,
        )
        default_service_used = BookingField.SERVICE in pending and BookingField.SERVICE not in accepted
        return self.validator.evaluate(draft, today, default_service_used=default_service_used)

    async def _reject_conflicting_phone(self, appointment: Appointment, check: AnswerCheck, today: date) -> None:
        """A phone answer may not move the booking onto a phone with another active appointment."""
        phone = check.accepted.get(BookingField.PHONE)
        if not phone:
            return
        existing = await self.conflicts.find_active_conflict(phone, today, exclude_id=appointment.id)
        if existing is None:
            return
        del check.accepted[BookingField.PHONE]
        check.rejected[BookingField.PHONE] = f"{phone} already has an active appointment: {existing.describe()}"
        logger.warning(
            {
                "event": "phone_answer_conflict",
                "appointment_id": appointment.id,
                "existing_id": existing.id,
            }
        )

    async def resolve(
        self,
        question: PendingQuestion,
        reply: str,
        directory: Sequence[str],
        today: date,
    ) -> Resolution:
        """
        Apply a reply to the appointment the question is about.

        Raises:
            ConversationStateError: If the question is not linked to a stored appointment
        """
        appointment = None
        if question.appointment_id:
            appointment = await self.store.get_appointment(question.appointment_id)
        if appointment is None:
            raise ConversationStateError(
                f"Question {question.message.id} is not linked to a stored appointment"
            )

        answers = self.parse_answers(reply, question.fields, directory, today)
        if not answers:
            missing = ", ".join(f.value.replace("_", " ") for f in question.fields)
            return Resolution(
                appointment=appointment,
                remaining=self.remaining_issues(appointment, question.fields, {}, today),
                rejected=[f"No answer found for: {missing}"],
                answered=False,
            )

        check = self.validate_answers(answers, directory, today)
        await self._reject_conflicting_phone(appointment, check, today)
        if check.accepted:
            changes = {FIELD_COLUMNS[f]: value for f, value in check.accepted.items()}
            appointment = await self.store.update_appointment(appointment.id, changes) or appointment
            logger.info(
                {
                    "event": "booking_answers_applied",
                    "appointment_id": appointment.id,
                    "fields": [f.value for f in check.accepted],
                }
            )

        return Resolution(
            appointment=appointment,
            remaining=self.remaining_issues(appointment, question.fields, check.accepted, today),
            rejected=list(check.rejected.values()),
        )

