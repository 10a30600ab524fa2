"""
Importance-ranked pruning.

Selects the subset of turns to retain when the store is over budget:
the most important turns first, each followed by the turns it references
when they still fit, then rebuilt in chronological order.
"""

import logging
from dataclasses import dataclass, replace

from .token_budget import estimate_turn_tokens

logger = logging.getLogger(__name__)


@dataclass
class PruneResult:
    """Retained turns and metadata (same order), plus the dropped turns."""

    turns: list
    metadata: list
    dropped: list


def rank_indices(metadata: list) -> list[int]:
    """Indices ordered by importance descending, earlier index first on ties."""
    return sorted(range(len(metadata)), key=lambda i: (-metadata[i].importance, i))


def prune(turns: list, metadata: list, budget: int) -> PruneResult:
    """
    Select a budget-fitting subset of turns.

    A candidate is admitted when the running total plus its cost stays
    strictly under the budget. Right after admitting a turn, the turns it
    references are tried in chronological order with the same test;
    those that don't fit are skipped for good.

    If not even the top-ranked turn fits, it is kept alone so the store
    never ends up empty.
    """
    costs = [estimate_turn_tokens(turn) for turn in turns]
    position = {turn.turn_id: i for i, turn in enumerate(turns)}
    ranking = rank_indices(metadata)

    kept: set[int] = set()
    running = 0

    for index in ranking:
        if index in kept or running + costs[index] >= budget:
            continue
        kept.add(index)
        running += costs[index]

        ref_positions = sorted(
            position[ref] for ref in metadata[index].references if ref in position
        )
        for ref_index in ref_positions:
            if ref_index in kept:
                continue
            if running + costs[ref_index] < budget:
                kept.add(ref_index)
                running += costs[ref_index]

    if not kept and ranking:
        top = ranking[0]
        logger.warning(
            "Turn %d alone (%d tokens) exceeds budget %d; keeping it anyway",
            turns[top].turn_id,
            costs[top],
            budget,
        )
        kept.add(top)

    kept_indices = sorted(kept)
    kept_ids = {turns[i].turn_id for i in kept_indices}

    new_turns = [turns[i] for i in kept_indices]
    # Drop references to turns that did not survive
    new_metadata = [
        replace(metadata[i], references=metadata[i].references & kept_ids)
        for i in kept_indices
    ]
    dropped = [turns[i] for i in range(len(turns)) if i not in kept]

    return PruneResult(turns=new_turns, metadata=new_metadata, dropped=dropped)
