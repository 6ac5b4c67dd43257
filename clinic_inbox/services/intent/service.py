"""
Intent classification service.
"""

from typing import Optional

from ...core.exceptions import ClassifierError
from ...core.models import Appointment, ClassificationResult
from ...logging import get_logger
from ..external.classifier import AIIntentClassifier
from .keywords import KeywordIntentClassifier

logger = get_logger("clinic.intent")

NO_APPOINTMENT_CONTEXT = "No upcoming appointment found"


def appointment_context(appointment: Optional[Appointment]) -> str:
    """One-line appointment description handed to the classifier."""
    if appointment is None:
        return NO_APPOINTMENT_CONTEXT
    return (
        f"Appointment on {appointment.appointment_date} at {appointment.appointment_time} "
        f"for {appointment.service}. Current status: {appointment.confirmation_status.value}"
    )


class IntentClassifier:
    """AI classification with a deterministic keyword fallback."""

    def __init__(
        self,
        ai_classifier: Optional[AIIntentClassifier] = None,
        fallback: Optional[KeywordIntentClassifier] = None,
    ):
        self.ai_classifier = ai_classifier
        self.fallback = fallback or KeywordIntentClassifier()

    async def classify(self, message: str, context: str) -> ClassificationResult:
        """Classify a message; never raises on classifier failure."""
        if self.ai_classifier is not None and self.ai_classifier.is_configured():
            try:
                return await self.ai_classifier.classify(message, context)
            except ClassifierError as e:
                logger.warning({"event": "classifier_fallback", "error": str(e)})

        result = self.fallback.classify(message)
        logger.info(
            {
                "event": "classified",
                "source": result.source.value,
                "intent": result.intent.value,
                "confidence": result.confidence.value,
            }
        )
        return result
