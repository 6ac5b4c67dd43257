"""
Booking-related exceptions.
"""


class BookingFlowError(Exception):
    """Base exception for booking flow errors."""
    pass


class ConversationStateError(BookingFlowError):
    """Exception raised when a pending question cannot be resolved."""
    pass
