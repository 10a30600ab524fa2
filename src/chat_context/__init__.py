"""
chat-context: budget-bounded conversation history for chat model clients.
"""

from .context import ContextConfig, ContextStore
from .history import ConversationHistory

__all__ = ["ContextConfig", "ContextStore", "ConversationHistory"]
