"""
Bounded conversation context store.

Keeps the dialogue as two parallel lists, turns and their metadata, under
a fixed token budget. Every append scores the new turn, links it to the
earlier turns it repeats, and prunes synchronously when the estimated total
goes over budget, so callers only ever observe a within-budget store.

Usage:
    store = ContextStore(budget=28_000)
    store.append("system", "You are a helpful AI assistant.")
    store.append("user", "What is 42?", 0.6)
    prompt = store.get_full_context()
"""

import itertools
import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from .config import ContextConfig
from .errors import ConfigurationError, InvalidArgumentError
from .pruning import prune
from .references import apply_reference_bonus, find_references
from .scoring import HeuristicImportanceScorer, ImportanceScorer
from .token_budget import TokenUsage, estimate_turn_tokens

logger = logging.getLogger(__name__)

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class Turn:
    """One message of the dialogue. Never mutated once stored."""

    role: str
    content: str
    turn_id: int
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def render(self) -> str:
        return f"{self.role}: {self.content}"


@dataclass
class TurnMetadata:
    """Scoring state for the turn at the same index."""

    importance: float
    # turn_ids of earlier turns this one repeats
    references: set[int] = field(default_factory=set)


class ContextStore:
    """Ordered, budget-bounded log of dialogue turns."""

    def __init__(
        self,
        budget: Optional[int] = None,
        config: Optional[ContextConfig] = None,
        scorer: Optional[ImportanceScorer] = None,
    ):
        self.config = config or ContextConfig()
        resolved = budget if budget is not None else self.config.get_budget()
        if resolved <= 0:
            raise ConfigurationError(f"Budget must be positive, got {resolved}")

        self._budget = resolved
        self.scorer = scorer or HeuristicImportanceScorer()

        self._lock = threading.RLock()
        self._turns: list[Turn] = []
        self._metadata: list[TurnMetadata] = []
        self._summaries: list[str] = []
        self._ids = itertools.count()
        self._prune_count = 0
        self._dropped_count = 0

    @property
    def budget(self) -> int:
        return self._budget

    @property
    def prune_count(self) -> int:
        """Number of prune passes run so far."""
        return self._prune_count

    @property
    def dropped_count(self) -> int:
        """Number of turns removed by prune passes so far."""
        return self._dropped_count

    @property
    def summaries(self) -> tuple[str, ...]:
        return tuple(self._summaries)

    def __len__(self) -> int:
        return len(self._turns)

    def append(self, role: str, content: str, base_importance: float = 0.5) -> int:
        """
        Append a turn and return its index.

        The index is the position right after appending; a prune triggered
        by this call may move or remove it.

        Raises:
            InvalidArgumentError: role is not system/user/assistant, or
                base_importance is not a number in [0.0, 1.0].
        """
        if role not in ROLES:
            raise InvalidArgumentError("role", role, f"expected one of {', '.join(ROLES)}")
        if not isinstance(base_importance, (int, float)):
            raise InvalidArgumentError(
                "base_importance", base_importance, "expected a number"
            )
        if not 0.0 <= base_importance <= 1.0:
            raise InvalidArgumentError(
                "base_importance", base_importance, "expected a value in [0.0, 1.0]"
            )

        with self._lock:
            turn = Turn(role=role, content=content, turn_id=next(self._ids))
            references = find_references(content, self._turns)
            meta = TurnMetadata(
                importance=self.scorer.score(role, content, base_importance),
                references=references,
            )

            # Bonus goes to earlier turns only, before the new one is added
            apply_reference_bonus(references, self._turns, self._metadata, self.scorer)

            self._turns.append(turn)
            self._metadata.append(meta)
            index = len(self._turns) - 1

            logger.debug(
                "Appended %s turn %d (importance %.2f, %d references)",
                role,
                turn.turn_id,
                meta.importance,
                len(references),
            )

            total = self.total_estimated_size()
            if total > self._budget:
                self._prune(total)

            return index

    def _prune(self, total: int) -> None:
        before = len(self._turns)
        result = prune(self._turns, self._metadata, self._budget)
        self._turns = result.turns
        self._metadata = result.metadata
        self._prune_count += 1
        self._dropped_count += len(result.dropped)

        logger.info(
            "Pruned %d of %d turns (%d -> %d tokens, budget %d)",
            len(result.dropped),
            before,
            total,
            self.total_estimated_size(),
            self._budget,
        )

    def total_estimated_size(self) -> int:
        """Sum of estimated tokens over current turns, computed from scratch."""
        with self._lock:
            return sum(estimate_turn_tokens(turn) for turn in self._turns)

    def token_usage(self) -> TokenUsage:
        return TokenUsage(used=self.total_estimated_size(), budget=self._budget)

    def current_turns(self) -> tuple[Turn, ...]:
        """Surviving turns in append order."""
        with self._lock:
            return tuple(self._turns)

    def metadata(self) -> tuple[TurnMetadata, ...]:
        """Copies of the metadata, index-aligned with current_turns()."""
        with self._lock:
            return tuple(
                replace(meta, references=set(meta.references)) for meta in self._metadata
            )

    def add_summary(self, summary: str) -> None:
        """Record summary text produced elsewhere for pruned history."""
        with self._lock:
            self._summaries.append(summary)

    def get_full_context(self) -> str:
        """Summaries first, then one "<role>: <content>" line per turn."""
        with self._lock:
            parts = [
                f"[Previous conversation summary]\n{summary}\n\n"
                for summary in self._summaries
            ]
            parts.extend(f"{turn.render()}\n" for turn in self._turns)
            return "".join(parts)

    def clear(self) -> None:
        """Drop every turn, its metadata and all summaries."""
        with self._lock:
            self._turns = []
            self._metadata = []
            self._summaries = []
            self._dropped_count = 0
