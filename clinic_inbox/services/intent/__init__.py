"""
Intent classification.
"""

from .keywords import KeywordIntentClassifier
from .service import IntentClassifier, appointment_context

__all__ = [
    "KeywordIntentClassifier",
    "IntentClassifier",
    "appointment_context",
]
