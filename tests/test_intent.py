"""
Tests for intent classification.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from clinic_inbox.core.enums import ClassifierSource, Confidence, ConfirmationStatus, Intent
from clinic_inbox.core.exceptions import ClassifierError
from clinic_inbox.core.models import Appointment
from clinic_inbox.services.external import AIIntentClassifier
from clinic_inbox.services.intent import IntentClassifier, KeywordIntentClassifier, appointment_context


def completion(content: str) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def openai_client(content: str = None, error: Exception = None) -> Mock:
    client = Mock()
    if error is not None:
        client.chat.completions.create = AsyncMock(side_effect=error)
    else:
        client.chat.completions.create = AsyncMock(return_value=completion(content))
    return client


class TestKeywordIntentClassifier:
    """Deterministic fallback classification."""

    @pytest.mark.parametrize(
        "message",
        ["I need to cancel", "Sorry I can’t make it", "I'm not coming tomorrow", "cannot come"],
    )
    def test_cancel(self, message):
        result = KeywordIntentClassifier().classify(message)
        assert result.intent == Intent.CANCEL
        assert result.confidence == Confidence.MEDIUM
        assert result.source == ClassifierSource.KEYWORDS

    @pytest.mark.parametrize("message", ["Can we change to Friday?", "please reschedule", "another day please"])
    def test_reschedule(self, message):
        result = KeywordIntentClassifier().classify(message)
        assert result.intent == Intent.RESCHEDULE
        assert result.needs_human is True

    @pytest.mark.parametrize("message", ["Yes", "ok see you", "Confirmed!", "👍", "I will come"])
    def test_confirm(self, message):
        result = KeywordIntentClassifier().classify(message)
        assert result.intent == Intent.CONFIRM
        assert result.confidence == Confidence.HIGH
        assert result.needs_human is False
        assert result.is_confident_confirm

    def test_bare_no_is_a_cancellation(self):
        result = KeywordIntentClassifier().classify("No")
        assert result.intent == Intent.CANCEL
        assert result.summary == "Patient declined the appointment"

    @pytest.mark.parametrize("message", ["How much is botox?", "I don't know", "okayish", ""])
    def test_unclear(self, message):
        result = KeywordIntentClassifier().classify(message)
        assert result.intent == Intent.UNCLEAR
        assert result.confidence == Confidence.LOW
        assert result.suggested_reply is None


class TestAIIntentClassifier:
    """OpenAI-backed classification with a mocked client."""

    def test_parse_content_tolerates_prose(self):
        result = AIIntentClassifier.parse_content(
            'Sure! {"intent": "Reschedule", "confidence": "HIGH", "new_date": "2030-03-20", '
            '"new_time": "null", "needs_human": true, "summary": "move to 20th"}'
        )

        assert result.intent == Intent.RESCHEDULE
        assert result.confidence == Confidence.HIGH
        assert result.new_date == "2030-03-20"
        assert result.new_time is None
        assert result.source == ClassifierSource.AI

    @pytest.mark.parametrize("content", ["no json here", "{not json}", '{"intent": "dance"}', None])
    def test_parse_content_rejects_garbage(self, content):
        with pytest.raises(ClassifierError):
            AIIntentClassifier.parse_content(content)

    @pytest.mark.asyncio
    async def test_classify_calls_model(self, settings):
        client = openai_client('{"intent": "confirm", "confidence": "high", "needs_human": false}')
        classifier = AIIntentClassifier(settings=settings, client=client)

        result = await classifier.classify("Yes", "No upcoming appointment found")

        assert result.is_confident_confirm
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == settings.classifier_model
        assert kwargs["response_format"] == {"type": "json_object"}
        assert 'Patient message: "Yes"' in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_request_failure_becomes_classifier_error(self, settings):
        classifier = AIIntentClassifier(settings=settings, client=openai_client(error=RuntimeError("timeout")))

        with pytest.raises(ClassifierError):
            await classifier.classify("Yes", "")

    @pytest.mark.asyncio
    async def test_not_configured(self, settings):
        classifier = AIIntentClassifier(settings=settings)
        assert classifier.is_configured() is False
        with pytest.raises(ClassifierError):
            await classifier.classify("Yes", "")


class TestIntentClassifier:
    """AI first, keywords on failure."""

    @pytest.mark.asyncio
    async def test_uses_ai_result(self, settings):
        client = openai_client('{"intent": "inquiry", "confidence": "medium", "needs_human": true}')
        classifier = IntentClassifier(ai_classifier=AIIntentClassifier(settings=settings, client=client))

        result = await classifier.classify("How much is it?", "")

        assert result.intent == Intent.INQUIRY
        assert result.source == ClassifierSource.AI

    @pytest.mark.asyncio
    async def test_falls_back_on_error(self, settings):
        client = openai_client(error=RuntimeError("rate limited"))
        classifier = IntentClassifier(ai_classifier=AIIntentClassifier(settings=settings, client=client))

        result = await classifier.classify("I need to cancel", "")

        assert result.intent == Intent.CANCEL
        assert result.source == ClassifierSource.KEYWORDS

    @pytest.mark.asyncio
    async def test_falls_back_on_garbage(self, settings):
        client = openai_client("I think they want to cancel")
        classifier = IntentClassifier(ai_classifier=AIIntentClassifier(settings=settings, client=client))

        result = await classifier.classify("Yes", "")

        assert result.intent == Intent.CONFIRM
        assert result.source == ClassifierSource.KEYWORDS

    @pytest.mark.asyncio
    async def test_unconfigured_ai_is_skipped(self, settings):
        classifier = IntentClassifier(ai_classifier=AIIntentClassifier(settings=settings))
        result = await classifier.classify("Yes", "")
        assert result.source == ClassifierSource.KEYWORDS


class TestAppointmentContext:
    def test_context(self):
        appointment = Appointment(
            patient_name="Aisha Khan",
            phone="0501234567",
            appointment_date="2030-03-15",
            appointment_time="15:00",
            service="Hydrafacial",
            confirmation_status=ConfirmationStatus.MESSAGE_SENT,
        )

        assert appointment_context(appointment) == (
            "Appointment on 2030-03-15 at 15:00 for Hydrafacial. Current status: message_sent"
        )
        assert appointment_context(None) == "No upcoming appointment found"
