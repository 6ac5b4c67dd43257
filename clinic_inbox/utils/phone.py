"""
Phone number parsing utilities.
"""

import re
from typing import List, Optional


class PhoneNumberParser:
    """Phone number helpers tolerant of formatting drift between channels."""

    def __init__(self, country_code: str = "971"):
        self.country_code = re.sub(r"\D", "", country_code or "")

    @staticmethod
    def digits(phone: Optional[str]) -> str:
        """Strip every separator, keeping only digits."""
        if not phone:
            return ""
        return re.sub(r"\D", "", phone)

    def to_local(self, phone: Optional[str]) -> Optional[str]:
        """
        Convert a number to local format (leading ``0``).

        Returns None when the number carries neither the clinic country code
        nor a leading zero.
        """
        digits = self.digits(phone)
        if not digits:
            return None
        if digits.startswith("00" + self.country_code):
            digits = digits[2:]
        if self.country_code and digits.startswith(self.country_code):
            return "0" + digits[len(self.country_code):]
        if digits.startswith("0"):
            return digits
        return None

    def to_international(self, phone: Optional[str]) -> Optional[str]:
        """Convert a number to ``<country code><subscriber>`` without ``+``."""
        local = self.to_local(phone)
        if not local:
            return None
        return self.country_code + local[1:]

    def variants(self, phone: Optional[str]) -> List[str]:
        """
        Return every textual encoding of ``phone`` that may be stored.

        Includes the value as given, digits only, with a leading ``+``, the
        local form and the international form with and without ``+``.
        """
        if not phone or not phone.strip():
            return []

        raw = phone.strip()
        digits = self.digits(raw)
        candidates = [raw, raw.lstrip("+"), digits, f"+{digits}"]

        local = self.to_local(raw)
        international = self.to_international(raw)
        if local:
            candidates.append(local)
        if international:
            candidates.extend([international, f"+{international}"])

        seen: List[str] = []
        for candidate in candidates:
            if candidate and candidate != "+" and candidate not in seen:
                seen.append(candidate)
        return seen

    def for_gateway(self, phone: str) -> str:
        """Format expected by the WATI API: international digits, no ``+``."""
        return self.to_international(phone) or self.digits(phone)
