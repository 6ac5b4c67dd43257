"""
Booking parsing and conflict detection.
"""

from .parser import BookingMessageParser
from .conflicts import ConflictDetector

__all__ = [
    "BookingMessageParser",
    "ConflictDetector",
]
