"""
Utility modules for the Clinic Inbox service.
"""

from .text import TextProcessor, FieldExtractor, ExtractedFields
from .phone import PhoneNumberParser
from .date import DateNormalizer, TimeNormalizer
from .names import StaffNameMatcher
from .validation import BookingValidator

__all__ = [
    "TextProcessor",
    "FieldExtractor",
    "ExtractedFields",
    "PhoneNumberParser",
    "DateNormalizer",
    "TimeNormalizer",
    "StaffNameMatcher",
    "BookingValidator",
]
