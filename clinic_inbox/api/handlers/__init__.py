"""
API handlers.
"""

from .health import HealthHandler
from .messages import MessagesHandler

__all__ = [
    "HealthHandler",
    "MessagesHandler",
]
