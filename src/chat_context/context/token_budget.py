"""
Token estimation for conversation turns.

Not a tokenizer: ~4 characters per token plus a fixed per-message overhead
for the role marker.
"""

from dataclasses import dataclass

CHARS_PER_TOKEN = 4
MESSAGE_OVERHEAD = 4


def estimate_tokens(text: str) -> int:
    """Rough token estimate: len // 4 plus the per-message overhead."""
    return len(text) // CHARS_PER_TOKEN + MESSAGE_OVERHEAD


def estimate_turn_tokens(turn) -> int:
    """Estimate tokens for a stored turn."""
    return estimate_tokens(turn.content)


@dataclass(frozen=True)
class TokenUsage:
    """Snapshot of how much of the budget the retained turns use."""

    used: int
    budget: int

    @property
    def percentage(self) -> int:
        return int(self.used / self.budget * 100)

    @property
    def remaining(self) -> int:
        return max(self.budget - self.used, 0)

    def describe(self) -> str:
        return f"{self.used} / {self.budget} tokens ({self.percentage}%)"
