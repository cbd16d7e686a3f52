"""Priority scoring and weighted-random item selection."""

import math
import random
from collections.abc import Iterable

import structlog

from alphabet_trainer.models.memory import MemoryState, StrengthLevel
from alphabet_trainer.srs.memory import error_rate

logger = structlog.get_logger()

DUE_BONUS = 1000
WEAKNESS_WEIGHT = 100
ERROR_WEIGHT = 50
UNSEEN_BONUS = 150
RECENCY_WEIGHT = 2
RECENCY_CAP = 100
TOP_PERCENT = 30

_default_rng = random.Random()


def questions_since_seen(state: MemoryState, question_index: int) -> int:
    return question_index - state.last_seen_at


def is_due(state: MemoryState, question_index: int) -> bool:
    """True when the item's review interval has elapsed."""
    return questions_since_seen(state, question_index) >= state.next_review_after


def calculate_priority(state: MemoryState, question_index: int) -> float:
    """Additive urgency score; higher means show sooner.

    Due items get a dominant bonus, then weaker items, items with recent
    errors, never-seen items and long-unseen items climb on top of that.
    """
    priority = 0.0

    if is_due(state, question_index):
        priority += DUE_BONUS

    priority += (StrengthLevel.MASTERED - state.strength_level) * WEAKNESS_WEIGHT
    priority += error_rate(state.error_history) * ERROR_WEIGHT

    if state.total_exposures == 0:
        priority += UNSEEN_BONUS

    priority += min(questions_since_seen(state, question_index) * RECENCY_WEIGHT, RECENCY_CAP)
    return priority


def rank_candidates(
    states: Iterable[MemoryState],
    question_index: int,
    exclude_ids: Iterable[str] = (),
) -> list[tuple[MemoryState, float]]:
    """Return (state, priority) pairs for non-excluded items, most urgent first."""
    excluded = set(exclude_ids)
    scored = [
        (state, calculate_priority(state, question_index))
        for state in states
        if state.item_id not in excluded
    ]
    # Stable sort keeps input order among equal priorities
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored


def select_next(
    states: Iterable[MemoryState],
    question_index: int,
    exclude_ids: Iterable[str] = (),
    rng: random.Random | None = None,
) -> MemoryState | None:
    """Pick the next item to practise.

    Draws from the top 30% of candidates (at least one), weighted by
    priority, so urgent items dominate without making the order fully
    predictable.

    Args:
        states: Memory states of the active vocabulary.
        question_index: Index of the question about to be asked.
        exclude_ids: Item ids that must not be picked (recent repeats).
        rng: Random source; a module-level generator is used when omitted.

    Returns:
        The chosen state, or None when no candidate remains.
    """
    ranked = rank_candidates(states, question_index, exclude_ids)
    if not ranked:
        logger.debug("no_candidates", question_index=question_index)
        return None

    top_count = max(1, math.ceil(len(ranked) * TOP_PERCENT / 100))
    top = ranked[:top_count]

    total_weight = sum(priority for _, priority in top)
    if total_weight <= 0:
        return top[0][0]

    draw = (rng or _default_rng).random() * total_weight
    cumulative = 0.0
    for state, priority in top:
        cumulative += priority
        if draw < cumulative:
            return state

    return top[0][0]
