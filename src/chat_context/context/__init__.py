"""
Bounded conversation context with importance-ranked pruning.

Keeps dialogue turns under a hard token budget:

- Token estimation: ~4 characters per token plus per-message overhead
- Importance scoring: pluggable strategy, heuristic by default
- Reference tracking: later turns that repeat an earlier turn raise its importance
- Pruning: most important turns (and what they reference) are kept, in
  their original order, whenever an append pushes the total over budget
"""

from .config import ContextConfig, MODEL_CONTEXT_WINDOWS
from .errors import ConfigurationError, ContextError, InvalidArgumentError
from .pruning import PruneResult, prune, rank_indices
from .references import apply_reference_bonus, find_references
from .scoring import HeuristicImportanceScorer, ImportanceScorer
from .store import ROLES, ContextStore, Turn, TurnMetadata
from .token_budget import TokenUsage, estimate_tokens, estimate_turn_tokens

__all__ = [
    "ContextConfig",
    "ContextError",
    "ContextStore",
    "ConfigurationError",
    "HeuristicImportanceScorer",
    "ImportanceScorer",
    "InvalidArgumentError",
    "MODEL_CONTEXT_WINDOWS",
    "PruneResult",
    "ROLES",
    "TokenUsage",
    "Turn",
    "TurnMetadata",
    "apply_reference_bonus",
    "estimate_tokens",
    "estimate_turn_tokens",
    "find_references",
    "prune",
    "rank_indices",
]
