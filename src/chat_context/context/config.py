"""
Context store configuration and model context window mappings.
"""

import os
from dataclasses import dataclass

from .errors import ConfigurationError

# Model → context window size (tokens)
MODEL_CONTEXT_WINDOWS: dict[str, int] = {
    # DeepSeek
    "deepseek-chat": 32_000,
    "deepseek-reasoner": 64_000,
    "deepseek-coder": 16_000,
    # OpenAI compatible
    "gpt-4o": 128_000,
    "gpt-4o-mini": 128_000,
    # Anthropic
    "claude-sonnet-4-5-20250929": 200_000,
    "claude-3-haiku": 200_000,
}

DEFAULT_CONTEXT_WINDOW = 32_000
DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant."


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class ContextConfig:
    """Configuration for the bounded conversation context."""

    # Context window (0 = auto-detect from model name)
    context_window: int = 0
    model_name: str = "deepseek-chat"

    # Tokens left free for the model's response
    response_reserve: int = 4_000

    # Explicit budget (0 = context_window - response_reserve)
    budget: int = 0

    # Seed turn for ConversationHistory
    system_prompt: str = DEFAULT_SYSTEM_PROMPT

    # Default base importance per role
    user_importance: float = 0.6
    assistant_importance: float = 0.5

    @classmethod
    def from_env(cls) -> "ContextConfig":
        """Load configuration from environment variables."""
        config = cls(
            context_window=_env_int("CONTEXT_WINDOW", "0"),
            model_name=os.getenv("CONTEXT_MODEL", "deepseek-chat"),
            response_reserve=_env_int("CONTEXT_RESPONSE_RESERVE", "4000"),
            budget=_env_int("CONTEXT_BUDGET", "0"),
            system_prompt=os.getenv("CONTEXT_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT),
            user_importance=_env_float("CONTEXT_USER_IMPORTANCE", "0.6"),
            assistant_importance=_env_float("CONTEXT_ASSISTANT_IMPORTANCE", "0.5"),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Raise ConfigurationError for role importances outside [0.0, 1.0]."""
        for name in ("user_importance", "assistant_importance"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be in [0.0, 1.0], got {value}")

    def get_context_window(self) -> int:
        """Resolve context window size from config or model name."""
        if self.context_window > 0:
            return self.context_window
        # Try exact match first, then prefix match
        if self.model_name in MODEL_CONTEXT_WINDOWS:
            return MODEL_CONTEXT_WINDOWS[self.model_name]
        for key, size in MODEL_CONTEXT_WINDOWS.items():
            if self.model_name.startswith(key):
                return size
        return DEFAULT_CONTEXT_WINDOW

    def get_budget(self) -> int:
        """
        Resolve the token budget for retained turns.

        An explicit budget wins; otherwise the budget is whatever the
        context window leaves after the response reserve.
        """
        if self.budget != 0:
            return self.budget
        return self.get_context_window() - self.response_reserve
