"""
Conversation state inferred from the message log.
"""

from .resolver import ConversationStateResolver, PendingQuestion, Resolution, AnswerCheck

__all__ = [
    "ConversationStateResolver",
    "PendingQuestion",
    "Resolution",
    "AnswerCheck",
]
