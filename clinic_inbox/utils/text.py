"""
Text processing utilities.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from ..core.enums import BookingField

NOTES = "notes"

# Longest alias wins, so "phone number" is tried before "phone".
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    BookingField.NAME.value: ("name", "patient name", "patient", "client name", "client"),
    BookingField.PHONE.value: (
        "phone", "number", "mobile", "contact", "whatsapp",
        "phone number", "mobile number", "contact number", "phone no",
    ),
    BookingField.DATE.value: ("date", "appointment date"),
    BookingField.TIME.value: ("time", "appointment time"),
    BookingField.SERVICE.value: ("service", "treatment", "procedure"),
    BookingField.BOOKED_BY.value: ("booked by", "agent", "staff"),
    NOTES: ("notes", "note", "special instructions", "instructions", "remarks"),
}

HEADER_KEYWORDS = ("appointment", "booking", "confirmation")

_BULLET_RE = re.compile(r"^\s*[•·\-–—*>]+\s*")
_MARKUP_RE = re.compile(r"[*_~`]")
_NESTED_LABEL_RE = re.compile(r"[A-Za-z]\s*[:：]\s")


def _build_label_patterns() -> List[Tuple[str, "re.Pattern[str]"]]:
    pairs = [(name, alias) for name, aliases in FIELD_ALIASES.items() for alias in aliases]
    pairs.sort(key=lambda pair: len(pair[1]), reverse=True)
    patterns = []
    for name, alias in pairs:
        label = r"\s+".join(re.escape(word) for word in alias.split())
        patterns.append(
            (
                name,
                re.compile(
                    rf"^{label}(?P<sep>\s*[:：]\s*|\s+[-–]\s+|\s+)(?P<value>.+)$",
                    re.IGNORECASE,
                ),
            )
        )
    return patterns


_LABEL_PATTERNS = _build_label_patterns()


def _key(name: Union[str, BookingField]) -> str:
    return name.value if isinstance(name, BookingField) else str(name)


@dataclass
class ExtractedFields:
    """Labeled values found in a message plus the lines that carried no label."""

    values: Dict[str, str] = field(default_factory=dict)
    free_lines: List[str] = field(default_factory=list)

    def get(self, name: Union[str, BookingField]) -> Optional[str]:
        return self.values.get(_key(name))

    def has(self, name: Union[str, BookingField]) -> bool:
        return _key(name) in self.values


class FieldExtractor:
    """Generic labeled-field extraction from free text."""

    @staticmethod
    def clean_line(line: str) -> str:
        """Strip bullet markers and bold/italic markup from a line."""
        line = _BULLET_RE.sub("", line.strip())
        line = _MARKUP_RE.sub("", line)
        return re.sub(r"\s+", " ", line).strip()

    @staticmethod
    def is_header(line: str) -> bool:
        lowered = line.lower()
        return ":" not in line and any(word in lowered for word in HEADER_KEYWORDS)

    @classmethod
    def match_label(cls, line: str) -> Optional[Tuple[str, str]]:
        """Return ``(field, value)`` if ``line`` is a labeled field."""
        cleaned = cls.clean_line(line)
        if not cleaned or cls.is_header(cleaned):
            return None
        for name, pattern in _LABEL_PATTERNS:
            match = pattern.match(cleaned)
            if not match:
                continue
            value = match.group("value").strip()
            # A bare "Label value" form must not swallow another "label: value"
            if ":" not in match.group("sep") and _NESTED_LABEL_RE.search(value):
                continue
            if value:
                return name, value
        return None

    @classmethod
    def lines(cls, text: str) -> List[str]:
        """Cleaned, non-empty lines of ``text``."""
        return [c for c in (cls.clean_line(raw) for raw in (text or "").splitlines()) if c]

    @classmethod
    def extract(cls, text: str) -> ExtractedFields:
        """Extract labeled fields; the first occurrence of each field wins."""
        result = ExtractedFields()
        for line in cls.lines(text):
            labeled = cls.match_label(line)
            if labeled is None:
                result.free_lines.append(line)
                continue
            name, value = labeled
            result.values.setdefault(name, value)
        return result


class TextProcessor:
    """Text processing utilities."""

    @staticmethod
    def normalize_reply(text: str) -> str:
        """Lowercase, trim and drop punctuation for short-answer matching."""
        if not isinstance(text, str):
            text = str(text or "")
        text = re.sub(r"[^\w\s]", " ", text.lower())
        return re.sub(r"\s+", " ", text).strip()

    @staticmethod
    def split_text_for_whatsapp(text: str, max_length: int = 4096) -> List[str]:
        """Split text into chunks suitable for WhatsApp."""
        if len(text) <= max_length:
            return [text]

        chunks = []
        current_chunk = ""

        for line in text.split("\n"):
            candidate = f"{current_chunk}\n{line}" if current_chunk else line
            if len(candidate) <= max_length:
                current_chunk = candidate
                continue
            if current_chunk:
                chunks.append(current_chunk)
            while len(line) > max_length:
                chunks.append(line[:max_length])
                line = line[max_length:]
            current_chunk = line

        if current_chunk:
            chunks.append(current_chunk)

        return chunks
