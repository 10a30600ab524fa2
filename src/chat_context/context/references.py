"""
Reference detection between turns.

A turn references an earlier one when it repeats that turn's opening
(first 20 characters, case-insensitive). Paraphrases are missed and short
generic openers can match; this is a heuristic, not a parser.
"""

import logging

from .scoring import ImportanceScorer

logger = logging.getLogger(__name__)

SNIPPET_CHARS = 20


def find_references(content: str, turns: list) -> set[int]:
    """
    Return the ids of the turns whose opening snippet appears in content.

    Empty or whitespace-only snippets never match.
    """
    haystack = content.lower()
    references = set()
    for turn in turns:
        snippet = turn.content[:SNIPPET_CHARS].lower()
        if not snippet.strip():
            continue
        if snippet in haystack:
            references.add(turn.turn_id)
    return references


def apply_reference_bonus(
    references: set[int],
    turns: list,
    metadata: list,
    scorer: ImportanceScorer,
) -> None:
    """Raise the importance of every referenced turn by the scorer's bonus."""
    if not references:
        return
    for turn, meta in zip(turns, metadata):
        if turn.turn_id in references:
            before = meta.importance
            meta.importance = scorer.boost(before)
            logger.debug(
                "Turn %d referenced, importance %.2f -> %.2f",
                turn.turn_id,
                before,
                meta.importance,
            )
