"""
Date and time normalization utilities.

Everything is normalized to canonical ``YYYY-MM-DD`` dates and 24-hour
``HH:MM`` times in the clinic's local time zone.
"""

import re
from datetime import date, datetime, time
from typing import Optional
import pytz
from dateparser import parse as parse_date

from ..config import get_settings

MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

_WEEKDAY_PREFIX_RE = re.compile(
    r"^(?:mon|tue|tues|wed|thu|thur|thurs|fri|sat|sun)[a-z]*\.?,?\s+", re.IGNORECASE
)
_ISO_RE = re.compile(r"^(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})$")
_DMY_RE = re.compile(r"^(\d{1,2})[/.\-](\d{1,2})(?:[/.\-](\d{4}|\d{2}))?$")
_DAY_MONTH_RE = re.compile(
    r"^(\d{1,2})(?:st|nd|rd|th)?\s+(?:of\s+)?([a-z]+)\.?,?(?:\s+(\d{4}))?$"
)
_MONTH_DAY_RE = re.compile(
    r"^([a-z]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?(?:\s+(\d{4}))?$"
)
_LOOKS_LIKE_TIME_RE = re.compile(r"\d\s*(?:am|pm|a\.m\.|p\.m\.)|\d:\d", re.IGNORECASE)

_TIME_RE = re.compile(r"^(\d{1,2})(?:[:.](\d{2}))?\s*(am|pm)?$")


class DateNormalizer:
    """Convert heterogeneous date text into ``YYYY-MM-DD``."""

    def __init__(self, timezone: Optional[str] = None):
        self.tz = pytz.timezone(timezone or get_settings().timezone)

    def today(self) -> date:
        """Current date in the clinic's time zone."""
        return datetime.now(self.tz).date()

    def normalize(
        self,
        text: Optional[str],
        today: Optional[date] = None,
        natural: bool = True,
    ) -> Optional[str]:
        """
        Normalize a date string.

        Accepts ISO ``YYYY-MM-DD``, ``DD/MM/YYYY``, ``18th February 2026`` and
        ``February 18, 2026``, optionally prefixed by a weekday. A missing year
        is the current year, rolled forward one year if the date already
        passed. Other natural phrases ("tomorrow") go through dateparser
        unless ``natural`` is False.

        Returns:
            Date in YYYY-MM-DD format or None if parsing fails
        """
        if not text or not text.strip():
            return None

        today = today or self.today()
        cleaned = re.sub(r"\s+", " ", text.strip().lower()).rstrip(".")
        cleaned = _WEEKDAY_PREFIX_RE.sub("", cleaned).strip()

        match = _ISO_RE.match(cleaned)
        if match:
            year, month, day = (int(g) for g in match.groups())
            return self._build(year, month, day, today, year_given=True)

        match = _DMY_RE.match(cleaned)
        if match:
            day, month, year = match.groups()
            return self._build_with_year(year, int(month), int(day), today)

        match = _DAY_MONTH_RE.match(cleaned)
        if match and match.group(2) in MONTHS:
            day, month_name, year = match.groups()
            return self._build_with_year(year, MONTHS[month_name], int(day), today)

        match = _MONTH_DAY_RE.match(cleaned)
        if match and match.group(1) in MONTHS:
            month_name, day, year = match.groups()
            return self._build_with_year(year, MONTHS[month_name], int(day), today)

        return self._parse_natural(cleaned, today) if natural else None

    def _build_with_year(self, year: Optional[str], month: int, day: int, today: date) -> Optional[str]:
        if year is None:
            return self._build(today.year, month, day, today, year_given=False)
        value = int(year)
        if len(year) == 2:
            value += 2000
        return self._build(value, month, day, today, year_given=True)

    @staticmethod
    def _build(year: int, month: int, day: int, today: date, year_given: bool) -> Optional[str]:
        try:
            result = date(year, month, day)
        except ValueError:
            return None
        if not year_given and result < today:
            try:
                result = result.replace(year=result.year + 1)
            except ValueError:
                return None
        return result.isoformat()

    def _parse_natural(self, text: str, today: date) -> Optional[str]:
        """Fallback for relative phrases like 'tomorrow' or 'next friday'."""
        if not re.search(r"[a-z]", text) or _LOOKS_LIKE_TIME_RE.search(text):
            return None
        try:
            parsed = parse_date(
                text,
                languages=["en"],
                settings={
                    "PREFER_DATES_FROM": "future",
                    "DATE_ORDER": "DMY",
                    "RELATIVE_BASE": datetime.combine(today, time(12, 0)),
                },
            )
        except Exception:
            return None
        return parsed.date().isoformat() if parsed else None

    @staticmethod
    def is_valid_iso_date(date_str: str) -> bool:
        """Check if string is a valid ISO date (YYYY-MM-DD)."""
        try:
            datetime.strptime(date_str, "%Y-%m-%d")
            return True
        except (TypeError, ValueError):
            return False


class TimeNormalizer:
    """Convert ``HH:MM``, ``H:MM AM/PM`` and ``H AM/PM`` into 24-hour ``HH:MM``."""

    @staticmethod
    def normalize(text: Optional[str]) -> Optional[str]:
        """
        Normalize a time string.

        Unparsable input returns None; no default time is ever assumed.
        """
        if not text or not text.strip():
            return None

        cleaned = text.strip().lower()
        cleaned = cleaned.replace("a.m.", "am").replace("p.m.", "pm")
        cleaned = cleaned.replace("a.m", "am").replace("p.m", "pm")
        cleaned = re.sub(r"\s*(?:hrs|hours)$", "", cleaned).strip()

        match = _TIME_RE.match(cleaned)
        if not match:
            return None

        hours = int(match.group(1))
        minutes = int(match.group(2) or 0)
        period = match.group(3)

        if minutes > 59:
            return None
        if period:
            if not 1 <= hours <= 12:
                return None
            if period == "pm" and hours < 12:
                hours += 12
            if period == "am" and hours == 12:
                hours = 0
        elif match.group(2) is None or hours > 23:
            # A bare "3" is ambiguous
            return None

        return f"{hours:02d}:{minutes:02d}"

    @staticmethod
    def is_valid_time_format(time_str: str) -> bool:
        """Check if string is a valid time format (HH:MM)."""
        try:
            datetime.strptime(time_str, "%H:%M")
            return True
        except (TypeError, ValueError):
            return False

    @staticmethod
    def format_time_for_display(time_str: str) -> str:
        """Format time string for display purposes."""
        try:
            return datetime.strptime(time_str, "%H:%M").strftime("%I:%M %p").lstrip("0")
        except (TypeError, ValueError):
            return time_str
