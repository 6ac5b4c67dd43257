"""
Deterministic keyword-based intent classifier.

Used whenever the AI classifier is unavailable or returns garbage, so the
webhook never fails to classify a message.
"""

import re
from typing import Iterable, Pattern

from ...core.enums import Intent, Confidence, ClassifierSource
from ...core.models import ClassificationResult

CANCEL_PHRASES = ("cancel", "can't make it", "cannot make it", "cannot come", "can't come", "not coming")
RESCHEDULE_PHRASES = ("reschedule", "change", "postpone", "move", "different time", "another day")
CONFIRM_PHRASES = (
    "yes", "confirm", "confirmed", "ok", "okay", "sure", "yep", "yeah",
    "i will come", "coming", "see you", "👍", "✅",
)
DECLINE_WORDS = ("no", "nope")


def _compile(phrases: Iterable[str]) -> Pattern[str]:
    alternatives = sorted((re.escape(p) for p in phrases), key=len, reverse=True)
    return re.compile(rf"(?<!\w)(?:{'|'.join(alternatives)})(?!\w)", re.IGNORECASE)


_CANCEL_RE = _compile(CANCEL_PHRASES)
_RESCHEDULE_RE = _compile(RESCHEDULE_PHRASES)
_CONFIRM_RE = _compile(CONFIRM_PHRASES)
_DECLINE_RE = _compile(DECLINE_WORDS)


class KeywordIntentClassifier:
    """Classify by keyword sets, checked in a fixed order."""

    @staticmethod
    def _normalize(message: str) -> str:
        return (message or "").replace("’", "'").strip().lower()

    def classify(self, message: str) -> ClassificationResult:
        text = self._normalize(message)

        # "not coming" contains "coming", so cancellations are checked first
        if _CANCEL_RE.search(text):
            return ClassificationResult(
                intent=Intent.CANCEL,
                confidence=Confidence.MEDIUM,
                suggested_reply="We're sorry to hear that. Our team will process your cancellation.",
                needs_human=True,
                summary="Patient wants to cancel",
                source=ClassifierSource.KEYWORDS,
            )
        if _RESCHEDULE_RE.search(text):
            return ClassificationResult(
                intent=Intent.RESCHEDULE,
                confidence=Confidence.MEDIUM,
                suggested_reply="Thank you! Our team will confirm your new appointment shortly.",
                needs_human=True,
                summary="Patient wants to reschedule",
                source=ClassifierSource.KEYWORDS,
            )
        if _CONFIRM_RE.search(text):
            return ClassificationResult(
                intent=Intent.CONFIRM,
                confidence=Confidence.HIGH,
                suggested_reply="Great! Your appointment is confirmed.",
                needs_human=False,
                summary="Patient confirmed appointment",
                source=ClassifierSource.KEYWORDS,
            )
        if _DECLINE_RE.search(text):
            return ClassificationResult(
                intent=Intent.CANCEL,
                confidence=Confidence.MEDIUM,
                suggested_reply="We're sorry to hear that. Our team will process your cancellation.",
                needs_human=True,
                summary="Patient declined the appointment",
                source=ClassifierSource.KEYWORDS,
            )
        return ClassificationResult(
            intent=Intent.UNCLEAR,
            confidence=Confidence.LOW,
            suggested_reply=None,
            needs_human=True,
            summary="Could not determine patient intent",
            source=ClassifierSource.KEYWORDS,
        )
