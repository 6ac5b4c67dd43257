"""
Webhook payload exceptions.
"""


class InvalidPayloadError(ValueError):
    """Exception raised when an inbound payload is missing required data."""
    pass
