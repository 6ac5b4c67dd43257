"""
OpenAI-backed intent classifier.
"""

import json
import re
from typing import Any, Optional
from openai import AsyncOpenAI
from pydantic import ValidationError

from ...config import Settings, get_settings
from ...core.enums import ClassifierSource
from ...core.exceptions import ClassifierError
from ...core.models import ClassificationResult
from ...logging import get_logger

logger = get_logger("clinic.classifier")

SYSTEM_PROMPT = """You are {clinic}'s message parser. Read the patient's WhatsApp reply and determine their intent regarding their appointment. Return ONLY valid JSON:
{{
  "intent": "confirm" | "reschedule" | "cancel" | "inquiry" | "unclear",
  "new_date": "YYYY-MM-DD or null",
  "new_time": "HH:MM or null",
  "confidence": "high" | "medium" | "low",
  "suggested_reply": "appropriate reply message in English",
  "needs_human": true/false,
  "summary": "brief summary of what patient wants"
}}

Examples:
- 'Yes' / 'Confirm' / 'I will come' / '👍' / 'ok' -> intent: confirm, confidence: high
- 'Can I come Friday at 3pm instead?' -> intent: reschedule, new_date/time extracted, confidence: high
- 'I need to cancel' / 'Can't make it' -> intent: cancel, confidence: high
- 'How much does it cost?' -> intent: inquiry, needs_human: true
- Random text -> intent: unclear, needs_human: true"""

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class AIIntentClassifier:
    """Classify patient replies with an OpenAI chat model returning JSON."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[Any] = None):
        self.settings = settings or get_settings()
        self._client = client

    def is_configured(self) -> bool:
        return self._client is not None or self.settings.is_classifier_configured()

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.settings.openai_api_key,
                timeout=self.settings.classifier_timeout,
                max_retries=0,
            )
        return self._client

    @staticmethod
    def parse_content(content: str) -> ClassificationResult:
        """Parse the model output, tolerating prose around the JSON object."""
        match = _JSON_OBJECT_RE.search(content or "")
        if not match:
            raise ClassifierError("Classifier returned no JSON object")
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ClassifierError(f"Classifier returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ClassifierError("Classifier returned a non-object JSON value")
        data["source"] = ClassifierSource.AI
        try:
            return ClassificationResult(**data)
        except ValidationError as e:
            raise ClassifierError(f"Classifier output failed validation: {e}") from e

    async def classify(self, message: str, appointment_context: str) -> ClassificationResult:
        """
        Classify ``message`` given a one-line description of the appointment.

        Raises:
            ClassifierError: If the call fails or the output is unusable
        """
        if not self.is_configured():
            raise ClassifierError("Classifier not configured")
        try:
            response = await self.client.chat.completions.create(
                model=self.settings.classifier_model,
                response_format={"type": "json_object"},
                temperature=0,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT.format(clinic=self.settings.clinic_name)},
                    {
                        "role": "user",
                        "content": f'Patient message: "{message}"\n\nAppointment context: {appointment_context}',
                    },
                ],
            )
            content = response.choices[0].message.content
        except Exception as e:
            raise ClassifierError(f"Classifier request failed: {e}") from e

        result = self.parse_content(content)
        logger.info(
            {"event": "classified", "source": "ai", "intent": result.intent.value, "confidence": result.confidence.value}
        )
        return result
