"""
External API-related exceptions.
"""


class ExternalAPIError(Exception):
    """Base exception for external API errors."""
    pass


class WhatsAppAPIError(ExternalAPIError):
    """Exception raised when WhatsApp gateway calls fail."""
    pass


class ClassifierError(ExternalAPIError):
    """Exception raised when the intent classifier fails or returns garbage."""
    pass
