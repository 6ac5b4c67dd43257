"""
Webhook handlers.
"""

from .whatsapp import WhatsAppWebhook

__all__ = [
    "WhatsAppWebhook",
]
