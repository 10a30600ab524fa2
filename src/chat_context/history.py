"""
Conversation history on top of the context store.

Bridges LangChain messages and the budget-bounded ``ContextStore``:
incoming messages (including streamed ``AIMessageChunk`` fragments) become
stored turns, and the retained turns are rendered back into LangChain
messages for the next request. The store never talks to a model itself.
"""

import logging
from typing import Iterable, Optional

from dotenv import load_dotenv
from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
)

from .context import ContextConfig, ContextStore, ImportanceScorer, Turn
from .context.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

DROPPED_CONTEXT_NOTICE = (
    "[Previous conversation context has been summarized to fit within token limits]"
)


def message_text(content) -> str:
    """
    Flatten message content to plain text.

    String content is returned as-is. For block lists, text blocks are kept
    and thinking/reasoning blocks are dropped.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict):
                if block.get("type") in ("thinking", "reasoning"):
                    continue
                text = block.get("text")
                if text:
                    parts.append(text)
        return "".join(parts)
    return str(content) if content else ""


def _role_of(message: BaseMessage) -> str:
    if isinstance(message, SystemMessage):
        return "system"
    if isinstance(message, HumanMessage):
        return "user"
    if isinstance(message, AIMessage):
        return "assistant"
    raise InvalidArgumentError(
        "message", type(message).__name__, "only system, human and AI messages are stored"
    )


def _to_message(turn: Turn) -> BaseMessage:
    if turn.role == "system":
        return SystemMessage(content=turn.content)
    if turn.role == "user":
        return HumanMessage(content=turn.content)
    return AIMessage(content=turn.content)


class ConversationHistory:
    """
    Budget-bounded chat history.

    Usage:
        history = ConversationHistory.from_env()
        history.add_user_message("What is 42?")
        response = llm.invoke(history.to_messages())
        history.add_message(response)
    """

    def __init__(
        self,
        config: Optional[ContextConfig] = None,
        scorer: Optional[ImportanceScorer] = None,
    ):
        self.config = config or ContextConfig()
        self.config.validate()
        self.store = ContextStore(config=self.config, scorer=scorer)
        if self.config.system_prompt:
            self.add_system_message(self.config.system_prompt)

    @classmethod
    def from_env(cls, scorer: Optional[ImportanceScorer] = None) -> "ConversationHistory":
        """Build from environment variables, reading .env first."""
        # override=True so the .env file wins over the process environment
        load_dotenv(override=True)
        return cls(config=ContextConfig.from_env(), scorer=scorer)

    @property
    def turns(self) -> tuple[Turn, ...]:
        return self.store.current_turns()

    def add_system_message(self, content: str) -> int:
        return self.store.append("system", content, 1.0)

    def add_user_message(self, content: str, importance: Optional[float] = None) -> int:
        if importance is None:
            importance = self.config.user_importance
        return self.store.append("user", content, importance)

    def add_assistant_message(
        self, content: str, importance: Optional[float] = None
    ) -> int:
        if importance is None:
            importance = self.config.assistant_importance
        return self.store.append("assistant", content, importance)

    def add_message(self, message: BaseMessage, importance: Optional[float] = None) -> int:
        """Store a LangChain system, human or AI message."""
        role = _role_of(message)
        content = message_text(message.content)
        if role == "system":
            return self.add_system_message(content)
        if role == "user":
            return self.add_user_message(content, importance)
        return self.add_assistant_message(content, importance)

    def add_streamed_response(
        self, chunks: Iterable, importance: Optional[float] = None
    ) -> Optional[int]:
        """
        Merge streamed fragments into one assistant turn.

        Accepts ``AIMessageChunk`` objects or plain strings. Nothing is
        stored for an empty stream, and None is returned.
        """
        parts = []
        count = 0
        for chunk in chunks:
            count += 1
            if isinstance(chunk, str):
                parts.append(chunk)
            else:
                parts.append(message_text(chunk.content))

        if count == 0:
            logger.debug("Empty response stream, nothing stored")
            return None

        logger.debug("Merged %d streamed fragments into one turn", count)
        return self.add_assistant_message("".join(parts), importance)

    def add_summary(self, summary: str) -> None:
        self.store.add_summary(summary)

    def to_messages(self) -> list[BaseMessage]:
        """
        Retained turns as LangChain messages.

        Leading system turns come first, then the summaries as one human
        message, then the rest of the conversation. When turns were pruned
        and no summary covers them, a short notice takes the summary's place.
        """
        turns = list(self.turns)
        split = 0
        while split < len(turns) and turns[split].role == "system":
            split += 1

        messages: list[BaseMessage] = [_to_message(turn) for turn in turns[:split]]
        summaries = self.store.summaries
        if summaries:
            content = "\n\n".join(
                f"[Previous conversation summary]\n{summary}" for summary in summaries
            )
            messages.append(HumanMessage(content=content, id="context-summary"))
        elif self.store.dropped_count:
            messages.append(AIMessage(content=DROPPED_CONTEXT_NOTICE, id="context-dropped"))
        messages.extend(_to_message(turn) for turn in turns[split:])
        return messages

    def get_full_context(self) -> str:
        return self.store.get_full_context()

    def usage_info(self) -> str:
        return self.store.token_usage().describe()
