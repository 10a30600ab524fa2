"""
Tests for the LangChain-facing conversation history.
"""

from unittest.mock import patch

import pytest
from langchain_core.messages import (
    AIMessage,
    AIMessageChunk,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)

from chat_context.context.config import ContextConfig
from chat_context.context.errors import ConfigurationError, InvalidArgumentError
from chat_context.history import (
    DROPPED_CONTEXT_NOTICE,
    ConversationHistory,
    message_text,
)

SYSTEM_PROMPT = "You are a helpful AI assistant."


class TestMessageText:
    def test_string_content(self):
        assert message_text("hello") == "hello"

    def test_strips_thinking_blocks(self):
        content = [
            {"type": "thinking", "thinking": "Let me think..."},
            {"type": "text", "text": "Here is my answer."},
        ]
        assert message_text(content) == "Here is my answer."

    def test_mixed_blocks(self):
        assert message_text(["a", {"type": "text", "text": "b"}]) == "ab"

    def test_empty(self):
        assert message_text(None) == ""
        assert message_text([]) == ""


class TestConversationHistory:
    def test_seeded_with_system_prompt(self):
        history = ConversationHistory()
        assert len(history.turns) == 1
        assert history.turns[0].role == "system"
        assert history.turns[0].content == SYSTEM_PROMPT

    def test_no_seed_when_prompt_empty(self):
        history = ConversationHistory(config=ContextConfig(system_prompt=""))
        assert history.turns == ()

    def test_role_default_importance(self):
        history = ConversationHistory(config=ContextConfig(system_prompt=""))
        history.add_user_message("hello there")
        history.add_assistant_message("hi")
        meta = history.store.metadata()
        assert meta[0].importance == pytest.approx(0.6)
        assert meta[1].importance == pytest.approx(0.5)

    def test_add_message_types(self):
        history = ConversationHistory(config=ContextConfig(system_prompt=""))
        history.add_message(SystemMessage(content="Be brief."))
        history.add_message(HumanMessage(content="hello"))
        history.add_message(AIMessage(content="hi"))
        assert [t.role for t in history.turns] == ["system", "user", "assistant"]

    def test_add_message_drops_thinking(self):
        history = ConversationHistory(config=ContextConfig(system_prompt=""))
        history.add_message(AIMessage(content=[
            {"type": "thinking", "thinking": "Deep reasoning here..."},
            {"type": "text", "text": "My answer."},
        ]))
        assert history.turns[0].content == "My answer."

    def test_add_message_rejects_tool_message(self):
        history = ConversationHistory()
        with pytest.raises(InvalidArgumentError):
            history.add_message(ToolMessage(content="result", tool_call_id="call-1"))
        assert len(history.turns) == 1

    def test_streamed_chunks_become_one_turn(self):
        history = ConversationHistory()
        chunks = [
            AIMessageChunk(content="Hel"),
            AIMessageChunk(content="lo, "),
            AIMessageChunk(content="world"),
        ]
        history.add_streamed_response(chunks)
        assert len(history.turns) == 2
        assert history.turns[-1].role == "assistant"
        assert history.turns[-1].content == "Hello, world"

    def test_streamed_strings(self):
        history = ConversationHistory()
        history.add_streamed_response(iter(["a", "b", "c"]))
        assert history.turns[-1].content == "abc"

    def test_empty_stream_stores_nothing(self):
        history = ConversationHistory()
        assert history.add_streamed_response([]) is None
        assert len(history.turns) == 1

    def test_to_messages(self):
        history = ConversationHistory()
        history.add_user_message("What is 42?")
        history.add_assistant_message("The answer.")
        messages = history.to_messages()
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert isinstance(messages[2], AIMessage)
        assert messages[1].content == "What is 42?"

    def test_to_messages_summary_after_system(self):
        history = ConversationHistory()
        history.add_summary("We discussed lists.")
        history.add_user_message("go on")
        messages = history.to_messages()
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert "[Previous conversation summary]" in messages[1].content
        assert "We discussed lists." in messages[1].content
        assert messages[2].content == "go on"

    def test_get_full_context(self):
        history = ConversationHistory()
        history.add_user_message("hello")
        assert history.get_full_context() == f"system: {SYSTEM_PROMPT}\nuser: hello\n"

    def test_usage_info(self):
        history = ConversationHistory()
        assert history.usage_info() == "11 / 28000 tokens (0%)"

    def test_pruning_through_history(self):
        history = ConversationHistory(config=ContextConfig(budget=60))
        for i in range(20):
            history.add_user_message(f"question {i} about something?")
            history.add_assistant_message(f"answer {i} with detail")
        assert history.store.total_estimated_size() <= 60
        assert history.turns[0].content == SYSTEM_PROMPT

    def test_dropped_notice_after_prune(self):
        history = ConversationHistory(config=ContextConfig(budget=60))
        for i in range(10):
            history.add_user_message(f"question {i} about something?")
        assert history.store.dropped_count > 0
        messages = history.to_messages()
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], AIMessage)
        assert messages[1].content == DROPPED_CONTEXT_NOTICE
        assert [m.content for m in messages].count(DROPPED_CONTEXT_NOTICE) == 1

    def test_no_dropped_notice_without_prune(self):
        history = ConversationHistory()
        history.add_user_message("hello")
        contents = [m.content for m in history.to_messages()]
        assert DROPPED_CONTEXT_NOTICE not in contents

    def test_summary_replaces_dropped_notice(self):
        history = ConversationHistory(config=ContextConfig(budget=60))
        for i in range(10):
            history.add_user_message(f"question {i} about something?")
        history.add_summary("Ten questions were asked.")
        contents = [m.content for m in history.to_messages()]
        assert DROPPED_CONTEXT_NOTICE not in contents
        assert "Ten questions were asked." in contents[1]

    def test_out_of_range_importance_fails_at_construction(self, monkeypatch):
        monkeypatch.setenv("CONTEXT_USER_IMPORTANCE", "1.5")
        with pytest.raises(ConfigurationError):
            ConversationHistory(config=ContextConfig.from_env())
        with pytest.raises(ConfigurationError):
            ConversationHistory(config=ContextConfig(user_importance=1.5))

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CONTEXT_BUDGET", "500")
        monkeypatch.setenv("CONTEXT_SYSTEM_PROMPT", "Be brief.")
        with patch("chat_context.history.load_dotenv") as mock_load:
            history = ConversationHistory.from_env()
        mock_load.assert_called_once_with(override=True)
        assert history.store.budget == 500
        assert history.turns[0].content == "Be brief."
