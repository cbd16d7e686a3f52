"""Aggregate views over memory states."""

import math
from collections.abc import Collection

from alphabet_trainer.models.memory import MemoryState, StrengthLevel


def get_weak_items(states: Collection[MemoryState]) -> list[MemoryState]:
    """Items still at NEW or LEARNING."""
    return [s for s in states if s.strength_level <= StrengthLevel.LEARNING]


def get_mastered_items(states: Collection[MemoryState]) -> list[MemoryState]:
    return [s for s in states if s.strength_level == StrengthLevel.MASTERED]


def get_overall_progress(states: Collection[MemoryState]) -> int:
    """Percentage of the maximum possible strength across all items."""
    if not states:
        return 0
    total = sum(int(s.strength_level) for s in states)
    maximum = len(states) * int(StrengthLevel.MASTERED)
    return math.floor(total / maximum * 100 + 0.5)


def get_srs_stats(states: Collection[MemoryState]) -> dict:
    """Counts per strength level plus overall progress."""
    counts = {level.label: 0 for level in StrengthLevel}
    for state in states:
        counts[StrengthLevel(state.strength_level).label] += 1

    return {
        "total": len(states),
        **counts,
        "progress_percentage": get_overall_progress(states),
        "average_strength": (
            sum(int(s.strength_level) for s in states) / len(states) if states else 0.0
        ),
    }
