"""
API layer for the Clinic Inbox service.
"""

from .app import create_app, build_service
from .webhooks import WhatsAppWebhook
from .middleware import SecurityHeaders, LoggingMiddleware

__all__ = [
    "create_app",
    "build_service",
    "WhatsAppWebhook",
    "SecurityHeaders",
    "LoggingMiddleware",
]
