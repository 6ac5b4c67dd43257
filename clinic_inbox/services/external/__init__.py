"""
External service integrations.
"""

from .whatsapp import WhatsAppGateway
from .classifier import AIIntentClassifier

__all__ = [
    "WhatsAppGateway",
    "AIIntentClassifier",
]
