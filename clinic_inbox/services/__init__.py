"""
Service layer for the Clinic Inbox service.
"""

from .store import Datastore
from .external import WhatsAppGateway, AIIntentClassifier
from .intent import IntentClassifier, KeywordIntentClassifier
from .booking import BookingMessageParser, ConflictDetector
from .conversation import ConversationStateResolver
from .inbound import InboundMessageService

__all__ = [
    "Datastore",
    "WhatsAppGateway",
    "AIIntentClassifier",
    "IntentClassifier",
    "KeywordIntentClassifier",
    "BookingMessageParser",
    "ConflictDetector",
    "ConversationStateResolver",
    "InboundMessageService",
]
