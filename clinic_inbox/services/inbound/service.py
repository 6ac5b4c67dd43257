"""
Inbound WhatsApp message orchestration.

Each inbound message goes through, in order:

1. conflict arbitration (a bare yes/no answering a conflict prompt),
2. re-delivered booking messages, which are acknowledged silently,
3. pending booking questions (answers to an earlier correction request),
4. booking messages (parse, conflict check, create),
5. intent classification for everything else.

Nothing is held in memory between calls; every step re-reads the store.
"""

from datetime import date, datetime
from typing import Callable, List, Optional, Sequence
import pytz

from ...config import Settings, get_settings
from ...core.enums import (
    BookingField,
    BookingIssue,
    ConfirmationStatus,
    MessageDirection,
    MessageTag,
    RequestType,
)
from ...core.exceptions import ConversationStateError
from ...core.models import (
    Appointment,
    ClassificationResult,
    InboundMessage,
    MessageLogEntry,
    ParsedBooking,
    PendingRequest,
    WebhookResponse,
    directory_names,
    utc_now,
)
from ...logging import get_logger
from ...utils.phone import PhoneNumberParser
from ...utils.validation import BookingValidator
from ..booking import BookingMessageParser, ConflictDetector
from ..booking import replies
from ..conversation import ConversationStateResolver, PendingQuestion
from ..external.whatsapp import WhatsAppGateway
from ..intent import IntentClassifier, appointment_context
from ..store import Datastore

logger = get_logger("clinic.inbound")

UNKNOWN_SENDER = "Unknown"


def _pending_fields(issues: Sequence[BookingIssue]) -> List[BookingField]:
    fields: List[BookingField] = []
    for issue in issues:
        if issue.field not in fields:
            fields.append(issue.field)
    return fields


class InboundMessageService:
    """Route an inbound message to the flow that should handle it."""

    def __init__(
        self,
        store: Datastore,
        gateway: WhatsAppGateway,
        classifier: IntentClassifier,
        settings: Optional[Settings] = None,
        validator: Optional[BookingValidator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store
        self.gateway = gateway
        self.classifier = classifier
        self.clock = clock or utc_now
        self.tz = pytz.timezone(self.settings.timezone)
        self.phones = PhoneNumberParser(self.settings.country_code)
        self.validator = validator or BookingValidator(
            clinic_open=self.settings.clinic_open,
            clinic_close=self.settings.clinic_close,
            min_phone_digits=self.settings.min_phone_digits,
            default_service=self.settings.default_service,
            timezone=self.settings.timezone,
        )
        self.parser = BookingMessageParser(
            validator=self.validator,
            matcher=self.validator.matcher,
            default_service=self.settings.default_service,
        )
        self.conflicts = ConflictDetector(
            store, self.phones, window_seconds=self.settings.redelivery_window_seconds
        )
        self.resolver = ConversationStateResolver(store, self.validator, self.conflicts)

    def now(self) -> datetime:
        return self.clock()

    def today(self) -> date:
        """Current date in the clinic's time zone."""
        return self.now().astimezone(self.tz).date()

    async def handle(self, message: InboundMessage) -> WebhookResponse:
        """Process one inbound message and return the webhook envelope."""
        variants = self.phones.variants(message.phone)
        logger.info(
            {
                "event": "wa_inbound",
                "phone": message.phone,
                "sender": message.sender_name,
                "chars": len(message.text),
            }
        )

        directory = directory_names(await self.store.get_booking_staff())
        today = self.today()

        stopped = await self.store.stop_followups(phone_variants=variants)
        if stopped:
            logger.info({"event": "followups_stopped", "phone": message.phone, "count": stopped})

        last = await self.store.last_outbound(variants)
        if last is not None and last.tag == MessageTag.BOOKING_CONFLICT_ASK:
            decision = self.conflicts.parse_decision(message.text)
            if decision is not None:
                return await self._resolve_conflict(message, last, decision, directory, today)

        parsed = self.parser.parse_booking(message.text, directory, today)
        if parsed is not None:
            duplicate = await self.conflicts.find_redelivery(parsed.draft, self.now())
            if duplicate is not None:
                return WebhookResponse(
                    success=True, intent="booking", appointment_id=duplicate.id, duplicate=True
                )
        is_full_booking = parsed is not None and bool(parsed.draft.phone)

        if not is_full_booking:
            question = self.resolver.question_from_entry(last)
            if question is not None:
                try:
                    return await self._answer_question(message, question, directory, today)
                except ConversationStateError as e:
                    logger.warning({"event": "question_unresolvable", "error": str(e)})

        if parsed is not None:
            return await self._handle_booking(message, parsed, variants, directory, today)

        return await self._classify(message, variants, today)

    # Message log helpers

    async def _log_inbound(
        self,
        message: InboundMessage,
        patient_name: Optional[str] = None,
        appointment_id: Optional[str] = None,
        tag: Optional[MessageTag] = None,
        result: Optional[ClassificationResult] = None,
    ) -> MessageLogEntry:
        return await self.store.append_message(
            MessageLogEntry(
                phone=message.phone,
                patient_name=patient_name or message.sender_name or UNKNOWN_SENDER,
                direction=MessageDirection.INBOUND,
                text=message.text,
                linked_appointment_id=appointment_id,
                classified_intent=result.intent if result else None,
                confidence=result.confidence if result else None,
                tag=tag,
                created_at=self.now(),
            )
        )

    async def _reply(
        self,
        phone: str,
        text: str,
        patient_name: Optional[str] = None,
        appointment_id: Optional[str] = None,
        tag: Optional[MessageTag] = None,
        awaiting_fields: Sequence[BookingField] = (),
        reply_to_id: Optional[int] = None,
    ) -> bool:
        """Log an outbound message, then attempt delivery."""
        entry = await self.store.append_message(
            MessageLogEntry(
                phone=phone,
                patient_name=patient_name,
                direction=MessageDirection.OUTBOUND,
                text=text,
                linked_appointment_id=appointment_id,
                tag=tag,
                awaiting_fields=list(awaiting_fields),
                reply_to_id=reply_to_id,
                created_at=self.now(),
            )
        )
        sent = await self.gateway.send_message(phone, text)
        if not sent:
            logger.warning({"event": "reply_not_delivered", "phone": phone, "message_id": entry.id})
        return sent

    async def _send_booking_outcome(
        self,
        phone: str,
        appointment: Appointment,
        issues: Sequence[BookingIssue],
        directory: Sequence[str],
        rejected: Sequence[str] = (),
    ) -> None:
        if issues:
            text = replies.issues_reply(appointment, issues, self.validator, directory, rejected)
            await self._reply(
                phone,
                text,
                patient_name=appointment.patient_name,
                appointment_id=appointment.id,
                tag=MessageTag.AWAITING_ANSWER,
                awaiting_fields=_pending_fields(issues),
            )
        else:
            await self._reply(
                phone,
                replies.completion_reply(appointment),
                patient_name=appointment.patient_name,
                appointment_id=appointment.id,
            )

    # Flows

    async def _new_appointment(self, parsed: ParsedBooking, **extra) -> Appointment:
        known = await self.store.patient_exists(self.phones.variants(parsed.draft.phone))
        return Appointment.from_draft(parsed.draft, is_new_patient=not known, created_at=self.now(), **extra)

    async def _handle_booking(
        self,
        message: InboundMessage,
        parsed: ParsedBooking,
        sender_variants: Sequence[str],
        directory: Sequence[str],
        today: date,
    ) -> WebhookResponse:
        if await self.conflicts.is_redelivered_conflict(sender_variants, message.text, self.now()):
            logger.info({"event": "booking_conflict_redelivery", "phone": message.phone})
            return WebhookResponse(success=True, intent="booking_conflict", duplicate=True)

        existing = None
        if parsed.draft.phone:
            existing = await self.conflicts.find_active_conflict(parsed.draft.phone, today)
        if existing is not None:
            inbound = await self._log_inbound(
                message,
                patient_name=parsed.draft.patient_name,
                appointment_id=existing.id,
                tag=MessageTag.BOOKING_CONFLICT,
            )
            await self._reply(
                message.phone,
                replies.conflict_prompt(existing, parsed.draft),
                patient_name=existing.patient_name,
                appointment_id=existing.id,
                tag=MessageTag.BOOKING_CONFLICT_ASK,
                reply_to_id=inbound.id,
            )
            logger.info({"event": "booking_conflict", "existing_id": existing.id})
            return WebhookResponse(success=True, intent="booking_conflict", appointment_id=existing.id)

        appointment = await self.store.insert_appointment(await self._new_appointment(parsed))
        await self._log_inbound(message, patient_name=appointment.patient_name, appointment_id=appointment.id)
        await self._send_booking_outcome(message.phone, appointment, parsed.issues, directory)
        return WebhookResponse(
            success=True,
            intent="booking",
            appointment_id=appointment.id,
            issues=[issue.value for issue in parsed.issues],
        )

    async def _resolve_conflict(
        self,
        message: InboundMessage,
        prompt: MessageLogEntry,
        replace: bool,
        directory: Sequence[str],
        today: date,
    ) -> WebhookResponse:
        existing = None
        if prompt.linked_appointment_id:
            existing = await self.store.get_appointment(prompt.linked_appointment_id)
        original = await self.store.get_message(prompt.reply_to_id) if prompt.reply_to_id else None
        await self._log_inbound(
            message,
            patient_name=existing.patient_name if existing else None,
            appointment_id=existing.id if existing else None,
        )

        parsed = self.parser.parse(original.text, directory, today) if original else None
        if existing is None or parsed is None:
            logger.warning({"event": "booking_conflict_expired", "prompt_id": prompt.id})
            await self._reply(message.phone, replies.conflict_expired_reply())
            return WebhookResponse(success=True, intent="booking_conflict_expired")

        if not replace:
            await self._reply(
                message.phone,
                replies.conflict_kept_reply(existing),
                patient_name=existing.patient_name,
                appointment_id=existing.id,
            )
            logger.info({"event": "booking_conflict_declined", "existing_id": existing.id})
            return WebhookResponse(success=True, intent="booking_conflict_declined", appointment_id=existing.id)

        replacement = await self._new_appointment(parsed, rescheduled_from=existing.id)
        appointment = await self.store.replace_appointment(existing.id, replacement)
        await self._send_booking_outcome(message.phone, appointment, parsed.issues, directory)
        return WebhookResponse(
            success=True,
            intent="booking_replaced",
            appointment_id=appointment.id,
            issues=[issue.value for issue in parsed.issues],
        )

    async def _answer_question(
        self,
        message: InboundMessage,
        question: PendingQuestion,
        directory: Sequence[str],
        today: date,
    ) -> WebhookResponse:
        resolution = await self.resolver.resolve(question, message.text, directory, today)
        appointment = resolution.appointment
        await self._log_inbound(message, patient_name=appointment.patient_name, appointment_id=appointment.id)
        await self._send_booking_outcome(
            message.phone, appointment, resolution.remaining, directory, resolution.rejected
        )
        return WebhookResponse(
            success=True,
            intent="booking_update",
            appointment_id=appointment.id,
            issues=[issue.value for issue in resolution.remaining],
        )

    async def _classify(
        self,
        message: InboundMessage,
        variants: Sequence[str],
        today: date,
    ) -> WebhookResponse:
        appointment = await self.store.find_upcoming_appointment(variants, today.isoformat())
        result = await self.classifier.classify(message.text, appointment_context(appointment))
        patient_name = appointment.patient_name if appointment else (message.sender_name or UNKNOWN_SENDER)
        await self._log_inbound(
            message,
            patient_name=patient_name,
            appointment_id=appointment.id if appointment else None,
            result=result,
        )

        if appointment is not None and result.is_confident_confirm:
            await self.store.update_appointment(
                appointment.id,
                {
                    "confirmation_status": ConfirmationStatus.CONFIRMED_WHATSAPP,
                    "confirmed_at": self.now(),
                    "last_reply": message.text,
                },
            )
            logger.info({"event": "appointment_confirmed", "appointment_id": appointment.id})
            return WebhookResponse(success=True, intent=result.intent.value, appointment_id=appointment.id)

        await self.store.insert_pending_request(
            PendingRequest(
                appointment_id=appointment.id if appointment else None,
                phone=message.phone,
                patient_name=patient_name,
                request_type=RequestType.from_intent(result.intent),
                original_message=message.text,
                classifier_output=result.as_dict(),
                confidence=result.confidence,
                suggested_reply=result.suggested_reply,
                needs_human_review=True,
                created_at=self.now(),
            )
        )
        if appointment is not None:
            await self.store.update_appointment(appointment.id, {"last_reply": message.text})
        return WebhookResponse(
            success=True,
            intent=result.intent.value,
            appointment_id=appointment.id if appointment else None,
        )

    # Supporting operations for the HTTP surface

    async def send_message(
        self,
        phone: str,
        text: str,
        patient_name: Optional[str] = None,
        appointment_id: Optional[str] = None,
    ) -> bool:
        """Send a free-text message and record it in the message log."""
        return await self._reply(phone, text, patient_name=patient_name, appointment_id=appointment_id)

    async def stop_followups(self, phone: Optional[str] = None, appointment_id: Optional[str] = None) -> int:
        """Stop active no-show follow-ups by appointment id or phone."""
        return await self.store.stop_followups(
            phone_variants=self.phones.variants(phone) if phone else None,
            appointment_id=appointment_id,
        )
