"""
Tests for the booking message parser and validation rules.
"""

from datetime import date

import pytest

from clinic_inbox.core.enums import BookingField, BookingIssue
from clinic_inbox.services.booking import BookingMessageParser
from clinic_inbox.utils.validation import BookingValidator

from conftest import DIRECTORY, booking_text

TODAY = date(2030, 3, 10)


@pytest.fixture
def validator():
    return BookingValidator(
        clinic_open="10:00",
        clinic_close="22:00",
        min_phone_digits=7,
        default_service="Consultation",
        timezone="Asia/Dubai",
    )


@pytest.fixture
def parser(validator):
    return BookingMessageParser(validator=validator, default_service="Consultation")


class TestBookingDetection:
    def test_keywords(self):
        assert BookingMessageParser.is_booking_message("Appointment Confirmation") is True
        assert BookingMessageParser.is_booking_message("new BOOKING for tomorrow") is True
        assert BookingMessageParser.is_booking_message("Yes I will come") is False

    def test_parse_booking_requires_keyword(self, parser):
        assert parser.parse_booking("Name: Aisha\nPhone: 0501234567", DIRECTORY, TODAY) is None

    def test_message_without_name_is_not_a_booking(self, parser):
        assert parser.parse("Appointment tomorrow please", DIRECTORY, TODAY) is None


class TestBookingParser:
    """Test parsing booking messages into drafts."""

    @pytest.mark.parametrize(
        "when,at",
        [
            ("15th March 2030", "3pm"),
            ("15/03/2030", "3:00 PM"),
            ("2030-03-15", "15:00"),
            ("Friday, 15th March 2030", "3 pm"),
        ],
    )
    def test_valid_booking_has_no_issues(self, parser, when, at):
        parsed = parser.parse(booking_text(when=when, time=at), DIRECTORY, TODAY)

        assert parsed is not None
        assert parsed.is_complete
        assert parsed.issues == []
        draft = parsed.draft
        assert draft.patient_name == "Aisha Khan"
        assert draft.phone == "0501234567"
        assert draft.appointment_date == "2030-03-15"
        assert draft.appointment_time == "15:00"
        assert draft.service == "Hydrafacial"
        assert draft.booked_by == "Sara Ahmed"

    def test_missing_service_defaults_and_is_flagged(self, parser):
        parsed = parser.parse(booking_text(service=""), DIRECTORY, TODAY)

        assert parsed.draft.service == "Consultation"
        assert parsed.issues == [BookingIssue.DEFAULT_SERVICE]
        assert parsed.pending_fields == [BookingField.SERVICE]

    def test_staff_found_in_free_text_line(self, parser):
        parsed = parser.parse(booking_text(booked_by="Fatma will follow up"), DIRECTORY, TODAY)

        assert parsed.draft.booked_by == "Fatima Khan"
        assert parsed.draft.raw_booked_by is None
        assert parsed.is_complete

    def test_header_line_is_not_scanned_for_staff(self, parser):
        text = "Booking Sara\nName: Aisha\nPhone: 0501234567\nDate: 15/03/2030\nTime: 3pm\nService: Laser"
        parsed = parser.parse(text, DIRECTORY, TODAY)

        assert parsed.draft.booked_by is None
        assert parsed.issues == [BookingIssue.MISSING_STAFF]

    def test_unmatched_staff(self, parser):
        parsed = parser.parse(booking_text(booked_by="Booked by Bob"), DIRECTORY, TODAY)

        assert parsed.draft.booked_by is None
        assert parsed.draft.raw_booked_by == "Bob"
        assert parsed.issues == [BookingIssue.MISSING_STAFF]

    def test_unparsable_time_is_never_defaulted(self, parser):
        parsed = parser.parse(booking_text(time="after lunch"), DIRECTORY, TODAY)

        assert parsed.draft.appointment_time is None
        assert parsed.draft.raw_time == "after lunch"
        assert parsed.issues == [BookingIssue.INVALID_TIME]

    @pytest.mark.parametrize("at", ["9am", "10:30pm", "23:00"])
    def test_time_outside_clinic_hours(self, parser, at):
        parsed = parser.parse(booking_text(time=at), DIRECTORY, TODAY)
        assert BookingIssue.INVALID_TIME in parsed.issues

    @pytest.mark.parametrize("at", ["10am", "10pm"])
    def test_clinic_hours_are_inclusive(self, parser, at):
        parsed = parser.parse(booking_text(time=at), DIRECTORY, TODAY)
        assert parsed.is_complete

    def test_missing_time(self, parser):
        parsed = parser.parse(booking_text(time=""), DIRECTORY, TODAY)
        assert parsed.issues == [BookingIssue.INVALID_TIME]

    def test_invalid_and_past_dates(self, parser):
        invalid = parser.parse(booking_text(when="32/13/2030"), DIRECTORY, TODAY)
        past = parser.parse(booking_text(when="01/03/2030"), DIRECTORY, TODAY)
        missing = parser.parse(booking_text(when=""), DIRECTORY, TODAY)

        assert invalid.issues == [BookingIssue.INVALID_DATE]
        assert invalid.draft.appointment_date is None
        assert past.issues == [BookingIssue.PAST_DATE]
        assert past.draft.appointment_date == "2030-03-01"
        assert missing.issues == [BookingIssue.INVALID_DATE]

    def test_today_is_not_past(self, parser):
        parsed = parser.parse(booking_text(when="10/03/2030"), DIRECTORY, TODAY)
        assert parsed.is_complete

    def test_short_phone(self, parser):
        parsed = parser.parse(booking_text(phone="12-34-5"), DIRECTORY, TODAY)
        assert parsed.issues == [BookingIssue.INVALID_PHONE]

    def test_every_issue_at_once(self, parser):
        text = "Appointment\nName: Aisha\nTime: noonish"
        parsed = parser.parse(text, DIRECTORY, TODAY)

        assert parsed.issues == [
            BookingIssue.INVALID_TIME,
            BookingIssue.INVALID_DATE,
            BookingIssue.INVALID_PHONE,
            BookingIssue.MISSING_STAFF,
            BookingIssue.DEFAULT_SERVICE,
        ]
        assert parsed.pending_fields == [
            BookingField.TIME,
            BookingField.DATE,
            BookingField.PHONE,
            BookingField.BOOKED_BY,
            BookingField.SERVICE,
        ]

    def test_notes_become_special_instructions(self, parser):
        text = booking_text() + "\nNotes: allergic to latex"
        parsed = parser.parse(text, DIRECTORY, TODAY)
        assert parsed.draft.special_instructions == "allergic to latex"


class TestBookingValidator:
    def test_validate_time(self, validator):
        assert validator.validate_time("4pm") == (True, "16:00", None)
        ok, value, error = validator.validate_time("9am")
        assert ok is False and value is None
        assert "outside clinic hours" in error

    def test_validate_date(self, validator):
        assert validator.validate_date("20/03/2030", TODAY) == (True, "2030-03-20", None)
        ok, _, error = validator.validate_date("01/03/2030", TODAY)
        assert ok is False
        assert "in the past" in error

    def test_validate_staff_lists_directory(self, validator):
        assert validator.validate_staff("Aly", DIRECTORY) == (True, "Ali Hassan", None)
        ok, _, error = validator.validate_staff("Bob", DIRECTORY)
        assert ok is False
        assert "Sara Ahmed, Fatima Khan, Ali Hassan" in error

    def test_describe_issue(self, validator):
        text = validator.describe_issue(BookingIssue.MISSING_STAFF, DIRECTORY)
        assert "Sara Ahmed, Fatima Khan, Ali Hassan" in text
        assert "10:00" in validator.describe_issue(BookingIssue.INVALID_TIME, DIRECTORY)
