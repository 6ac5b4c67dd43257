"""
Custom exceptions for the Clinic Inbox service.
"""

from .booking import BookingFlowError, ConversationStateError
from .external import ExternalAPIError, WhatsAppAPIError, ClassifierError
from .storage import DatastoreError
from .webhook import InvalidPayloadError

__all__ = [
    "BookingFlowError",
    "ConversationStateError",
    "ExternalAPIError",
    "WhatsAppAPIError",
    "ClassifierError",
    "DatastoreError",
    "InvalidPayloadError",
]
