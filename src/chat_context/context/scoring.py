"""
Importance scoring for conversation turns.

The store only depends on ``ImportanceScorer``; ``HeuristicImportanceScorer``
is the default policy and can be swapped for another heuristic or a learned
model without touching pruning.
"""

import re
from abc import ABC, abstractmethod

# Numbers, ISO dates, URLs, acronyms
DATA_PATTERNS = (
    re.compile(r"\d+"),
    re.compile(r"\d{4}-\d{2}-\d{2}"),
    re.compile(r"https?://\S+"),
    re.compile(r"[A-Z]{2,}"),
)

CODE_FENCE = "```"


def clamp(value: float) -> float:
    # Rounded so equal bonus sums compare equal (0.4 + 0.2 == 0.6)
    return round(max(0.0, min(value, 1.0)), 6)


def contains_important_data(content: str) -> bool:
    """True if the content holds a number, date, URL or acronym."""
    return any(pattern.search(content) for pattern in DATA_PATTERNS)


class ImportanceScorer(ABC):
    """Strategy that assigns an importance in [0.0, 1.0] to a turn."""

    # Added to a turn each time a later turn references it
    reference_bonus: float = 0.1

    @abstractmethod
    def score(self, role: str, content: str, base_importance: float) -> float:
        """Return the importance of a new turn."""

    def boost(self, importance: float) -> float:
        """Importance of a turn after one more turn referenced it."""
        return clamp(importance + self.reference_bonus)


class HeuristicImportanceScorer(ImportanceScorer):
    """
    Additive heuristic over role and content.

    - system turns are always 1.0
    - question mark: +0.2
    - fenced code block: +0.3
    - longer than 500 characters: +0.1
    - numbers, dates, URLs or acronyms (any of them): +0.2

    All checks look at the same input; bonuses are summed and clamped.
    """

    question_bonus = 0.2
    code_bonus = 0.3
    length_bonus = 0.1
    data_bonus = 0.2
    long_content_chars = 500

    def score(self, role: str, content: str, base_importance: float) -> float:
        if role == "system":
            return 1.0

        importance = base_importance
        if "?" in content:
            importance += self.question_bonus
        if CODE_FENCE in content:
            importance += self.code_bonus
        if len(content) > self.long_content_chars:
            importance += self.length_bonus
        if contains_important_data(content):
            importance += self.data_bonus

        return clamp(importance)
