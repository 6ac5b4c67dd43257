"""
Configuration management for the Clinic Inbox service.
"""

from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
