"""
Tests for date and time normalization.
"""

from datetime import date

import pytest

from clinic_inbox.utils.date import DateNormalizer, TimeNormalizer

TODAY = date(2030, 3, 10)


class TestDateNormalizer:
    """Test date normalization."""

    @pytest.mark.parametrize(
        "text",
        [
            "18th February 2026",
            "18/02/2026",
            "2026-02-18",
            "February 18, 2026",
            "Wednesday, 18th February 2026",
            "18 Feb 2026",
            "18.02.2026",
            "18-02-26",
        ],
    )
    def test_supported_formats(self, text):
        normalizer = DateNormalizer("Asia/Dubai")
        assert normalizer.normalize(text, TODAY) == "2026-02-18"

    def test_missing_year_uses_current_year(self):
        normalizer = DateNormalizer("Asia/Dubai")
        assert normalizer.normalize("15 March", TODAY) == "2030-03-15"
        assert normalizer.normalize("15/03", TODAY) == "2030-03-15"

    def test_missing_year_rolls_forward_when_passed(self):
        normalizer = DateNormalizer("Asia/Dubai")
        assert normalizer.normalize("18 Feb", TODAY) == "2031-02-18"

    def test_explicit_past_year_is_kept(self):
        normalizer = DateNormalizer("Asia/Dubai")
        assert normalizer.normalize("01/03/2030", TODAY) == "2030-03-01"

    def test_impossible_dates(self):
        normalizer = DateNormalizer("Asia/Dubai")
        assert normalizer.normalize("30/02/2030", TODAY) is None
        assert normalizer.normalize("32/13/2030", TODAY) is None
        assert normalizer.normalize("", TODAY) is None
        assert normalizer.normalize(None, TODAY) is None

    def test_natural_phrases(self):
        normalizer = DateNormalizer("Asia/Dubai")
        assert normalizer.normalize("tomorrow", TODAY) == "2030-03-11"

    def test_natural_phrases_can_be_disabled(self):
        normalizer = DateNormalizer("Asia/Dubai")
        assert normalizer.normalize("tomorrow", TODAY, natural=False) is None

    def test_times_are_not_dates(self):
        normalizer = DateNormalizer("Asia/Dubai")
        assert normalizer.normalize("3pm", TODAY) is None
        assert normalizer.normalize("15:00", TODAY) is None

    def test_is_valid_iso_date(self):
        assert DateNormalizer.is_valid_iso_date("2030-03-10") is True
        assert DateNormalizer.is_valid_iso_date("10/03/2030") is False


class TestTimeNormalizer:
    """Test time normalization."""

    @pytest.mark.parametrize("text", ["3pm", "3:00 PM", "15:00", "3 pm", "3.00pm", "3 p.m."])
    def test_afternoon_formats(self, text):
        assert TimeNormalizer.normalize(text) == "15:00"

    def test_morning_and_edges(self):
        assert TimeNormalizer.normalize("9:30 am") == "09:30"
        assert TimeNormalizer.normalize("12 am") == "00:00"
        assert TimeNormalizer.normalize("12pm") == "12:00"
        assert TimeNormalizer.normalize("9:05") == "09:05"

    def test_unparsable_time_is_none(self):
        """No default time is ever invented."""
        assert TimeNormalizer.normalize("3") is None
        assert TimeNormalizer.normalize("25:00") is None
        assert TimeNormalizer.normalize("13pm") is None
        assert TimeNormalizer.normalize("10:75") is None
        assert TimeNormalizer.normalize("after lunch") is None
        assert TimeNormalizer.normalize("") is None

    def test_format_time_for_display(self):
        assert TimeNormalizer.format_time_for_display("15:00") == "3:00 PM"
        assert TimeNormalizer.format_time_for_display("bad") == "bad"
