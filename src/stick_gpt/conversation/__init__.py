"""Conversation history for stick-gpt.

This package provides the turn data model and the ConversationStore that
keeps, resets and persists the ordered turn log.
"""

from stick_gpt.conversation.store import ConversationStore
from stick_gpt.conversation.types import ToolCallRequest, Turn

__all__ = [
    "ConversationStore",
    "ToolCallRequest",
    "Turn",
]
