"""
Tests for core models.
"""

from datetime import datetime, timezone

import pytest

from clinic_inbox.core.enums import (
    AppointmentStatus,
    BookingField,
    BookingIssue,
    Confidence,
    Intent,
    RequestType,
    StaffRole,
    StaffStatus,
)
from clinic_inbox.core.exceptions import InvalidPayloadError
from clinic_inbox.core.models import (
    Appointment,
    AppointmentDraft,
    ClassificationResult,
    InboundPayload,
    ParsedBooking,
    StaffMember,
    WebhookResponse,
    directory_names,
)


class TestInboundPayload:
    """Test webhook payload normalization."""

    def test_primary_field_names(self):
        payload = InboundPayload.from_body(
            {"waId": "971501234567", "text": " Yes ", "senderName": "Aisha"}
        )
        message = payload.to_message()

        assert message.phone == "971501234567"
        assert message.text == "Yes"
        assert message.sender_name == "Aisha"

    def test_fallback_field_names(self):
        payload = InboundPayload.from_body({"from": "0501234567", "body": "hi", "pushName": "Omar"})

        assert payload.phone == "0501234567"
        assert payload.text == "hi"
        assert payload.sender_name == "Omar"

    def test_first_non_empty_key_wins(self):
        payload = InboundPayload.from_body({"waId": "", "senderPhone": "0501234567", "text": "hi"})
        assert payload.phone == "0501234567"

    def test_nested_text_and_numeric_phone(self):
        payload = InboundPayload.from_body({"waId": 971501234567, "text": {"body": "Confirm"}})

        assert payload.phone == "971501234567"
        assert payload.text == "Confirm"

    def test_epoch_timestamp(self):
        payload = InboundPayload.from_body({"waId": "1", "text": "x", "timestamp": "1900000000"})
        assert payload.timestamp == datetime.fromtimestamp(1900000000, tz=timezone.utc)

    def test_iso_timestamp(self):
        payload = InboundPayload.from_body({"waId": "1", "text": "x", "created": "2030-03-10T08:00:00Z"})
        assert payload.timestamp == datetime(2030, 3, 10, 8, 0, tzinfo=timezone.utc)

    def test_unparsable_timestamp_is_ignored(self):
        payload = InboundPayload.from_body({"waId": "1", "text": "x", "timestamp": "yesterday"})
        assert payload.timestamp is None
        assert payload.to_message().received_at is not None

    @pytest.mark.parametrize("body", [{"text": "hi"}, {"waId": "971501234567"}, {"waId": " ", "text": "hi"}])
    def test_missing_fields(self, body):
        with pytest.raises(InvalidPayloadError):
            InboundPayload.from_body(body).to_message()

    @pytest.mark.parametrize("body", [[], "text", None, 42])
    def test_non_object_body(self, body):
        with pytest.raises(InvalidPayloadError):
            InboundPayload.from_body(body)


class TestWebhookResponse:
    def test_to_json_drops_empty_fields(self):
        response = WebhookResponse(success=True, intent="booking", appointment_id="a1", issues=[])
        assert response.to_json() == {
            "success": True,
            "intent": "booking",
            "appointment_id": "a1",
            "issues": [],
        }

    def test_error_envelope(self):
        assert WebhookResponse(success=False, error="boom").to_json() == {"success": False, "error": "boom"}


class TestClassificationResult:
    """Test classifier output normalization."""

    def test_case_and_null_strings(self):
        result = ClassificationResult(
            intent="CONFIRM", confidence=" High ", new_date="null", new_time="", suggested_reply="None"
        )

        assert result.intent == Intent.CONFIRM
        assert result.confidence == Confidence.HIGH
        assert result.new_date is None
        assert result.new_time is None
        assert result.suggested_reply is None
        assert result.is_confident_confirm

    def test_defaults_are_cautious(self):
        result = ClassificationResult(intent="confirm")
        assert result.confidence == Confidence.LOW
        assert result.needs_human is True
        assert not result.is_confident_confirm

    def test_as_dict_is_json_safe(self):
        data = ClassificationResult(intent="cancel", confidence="medium").as_dict()
        assert data["intent"] == "cancel"
        assert data["source"] == "ai"


class TestEnums:
    @pytest.mark.parametrize(
        "intent,expected",
        [
            (Intent.RESCHEDULE, RequestType.RESCHEDULE),
            (Intent.CANCEL, RequestType.CANCELLATION),
            (Intent.INQUIRY, RequestType.INQUIRY),
            (Intent.UNCLEAR, RequestType.UNCLEAR),
            (Intent.CONFIRM, RequestType.UNCLEAR),
        ],
    )
    def test_request_type_from_intent(self, intent, expected):
        assert RequestType.from_intent(intent) == expected

    def test_issue_fields(self):
        assert BookingIssue.PAST_DATE.field == BookingField.DATE
        assert BookingIssue.MISSING_STAFF.field == BookingField.BOOKED_BY
        assert BookingIssue.DEFAULT_SERVICE.field == BookingField.SERVICE


class TestAppointment:
    """Test appointment models."""

    def make(self, **overrides) -> Appointment:
        data = dict(
            patient_name="Aisha Khan",
            phone="0501234567",
            appointment_date="2030-03-15",
            appointment_time="15:00",
            service="Hydrafacial",
        )
        data.update(overrides)
        return Appointment(**data)

    def test_from_draft(self):
        draft = AppointmentDraft(
            patient_name="Aisha Khan",
            phone="0501234567",
            appointment_date="2030-03-15",
            appointment_time=None,
            service="Consultation",
            raw_time="after lunch",
        )

        appointment = Appointment.from_draft(draft, is_new_patient=True)

        assert appointment.status == AppointmentStatus.UPCOMING
        assert appointment.appointment_time is None
        assert appointment.is_new_patient is True
        assert appointment.id

    def test_is_active_on(self):
        assert self.make().is_active_on("2030-03-15") is True
        assert self.make().is_active_on("2030-03-16") is False
        assert self.make(status=AppointmentStatus.CHECKED_IN).is_active_on("2030-03-10") is True
        assert self.make(status=AppointmentStatus.COMPLETED).is_active_on("2030-03-10") is False
        assert self.make(appointment_date=None).is_active_on("2030-03-10") is False

    def test_describe(self):
        assert self.make().describe() == "Aisha Khan on 2030-03-15 at 15:00 for Hydrafacial"
        assert self.make(appointment_date=None, appointment_time=None).describe() == (
            "Aisha Khan on an unknown date for Hydrafacial"
        )

    def test_pending_fields_deduplicate(self):
        draft = AppointmentDraft(patient_name="A", service="Consultation")
        parsed = ParsedBooking(
            draft=draft,
            issues=[BookingIssue.INVALID_DATE, BookingIssue.PAST_DATE, BookingIssue.INVALID_PHONE],
        )

        assert parsed.pending_fields == [BookingField.DATE, BookingField.PHONE]
        assert not parsed.is_complete


class TestStaffMember:
    def test_can_book(self):
        assert StaffMember(full_name="Sara Ahmed").can_book is True
        assert StaffMember(full_name="Ali Hassan", role=StaffRole.ADMIN).can_book is True
        assert StaffMember(full_name="Dr Lina", role=StaffRole.DOCTOR).can_book is False
        assert StaffMember(full_name="Mariam", status=StaffStatus.INACTIVE).can_book is False

    def test_directory_names_keep_order(self):
        staff = [
            StaffMember(full_name="Sara Ahmed"),
            StaffMember(full_name="Noor Saleh", role=StaffRole.NURSE),
            StaffMember(full_name="Fatima Khan"),
        ]
        assert directory_names(staff) == ["Sara Ahmed", "Fatima Khan"]
        assert staff[0].first_name == "Sara"
