"""
Inbound message orchestration.
"""

from .service import InboundMessageService

__all__ = [
    "InboundMessageService",
]
