"""Memory model: strength levels, review intervals and answer updates.

Intervals are counted in questions rather than wall-clock time, which suits
short practice sessions where the same small vocabulary cycles quickly.
"""

import math

from alphabet_trainer.models.memory import MemoryState, StrengthLevel

# Questions to wait before an item is due again, per strength level
REVIEW_INTERVALS: dict[StrengthLevel, int] = {
    StrengthLevel.NEW: 2,
    StrengthLevel.LEARNING: 5,
    StrengthLevel.FAMILIAR: 15,
    StrengthLevel.MASTERED: 30,
}

# Total correct answers needed to reach each level
LEVEL_THRESHOLDS: list[tuple[int, StrengthLevel]] = [
    (7, StrengthLevel.MASTERED),
    (4, StrengthLevel.FAMILIAR),
    (2, StrengthLevel.LEARNING),
]

# Levels lost on an incorrect answer
FORGETTING_PENALTY: dict[StrengthLevel, int] = {
    StrengthLevel.NEW: 1,
    StrengthLevel.LEARNING: 1,
    StrengthLevel.FAMILIAR: 1,
    StrengthLevel.MASTERED: 2,
}

MAX_ERROR_HISTORY = 5
RECENT_WINDOW = 3
SLUMP_ERROR_RATE = 0.5
SLUMP_MAX_CORRECT = 10


def create_memory_state(item_id: str) -> MemoryState:
    """Create the initial state for an item never shown before."""
    return MemoryState(
        item_id=item_id,
        strength_level=StrengthLevel.NEW,
        next_review_after=REVIEW_INTERVALS[StrengthLevel.NEW],
    )


def error_rate(history: tuple[int, ...] | list[int]) -> float:
    """Fraction of incorrect outcomes in ``history`` (0.0 when empty)."""
    if not history:
        return 0.0
    return sum(1 for outcome in history if outcome == 0) / len(history)


def calculate_strength_level(
    correct_count: int,
    incorrect_count: int,
    error_history: tuple[int, ...],
) -> StrengthLevel:
    """Derive the strength level from cumulative evidence.

    A slump (more than half of the last three answers wrong) on an item with
    fewer than ten correct answers resets it to NEW. Otherwise the level is
    the highest tier whose correct-count threshold is met.

    Args:
        correct_count: Lifetime correct answers.
        incorrect_count: Lifetime incorrect answers (unused).
        error_history: Recent outcomes, oldest first.

    Returns:
        The computed strength level.
    """
    recent = error_history[-RECENT_WINDOW:]
    if error_rate(recent) > SLUMP_ERROR_RATE and correct_count < SLUMP_MAX_CORRECT:
        return StrengthLevel.NEW

    for threshold, level in LEVEL_THRESHOLDS:
        if correct_count >= threshold:
            return level
    return StrengthLevel.NEW


def next_review_interval(level: StrengthLevel) -> int:
    return REVIEW_INTERVALS.get(StrengthLevel(level), REVIEW_INTERVALS[StrengthLevel.NEW])


def _running_average(state: MemoryState, response_time_ms: float) -> int:
    if state.total_exposures == 0:
        average = response_time_ms
    else:
        average = (
            state.average_response_time_ms * state.total_exposures + response_time_ms
        ) / (state.total_exposures + 1)
    # Round half up, stored as whole milliseconds
    return math.floor(average + 0.5)


def _append_outcome(history: tuple[int, ...], outcome: int) -> tuple[int, ...]:
    return (*history, outcome)[-MAX_ERROR_HISTORY:]


def update_correct(
    state: MemoryState,
    response_time_ms: float,
    question_index: int,
) -> MemoryState:
    """Return the state after a correct answer."""
    correct_count = state.correct_count + 1
    history = _append_outcome(state.error_history, 1)
    level = calculate_strength_level(correct_count, state.incorrect_count, history)

    return state.model_copy(update={
        "correct_count": correct_count,
        "error_history": history,
        "strength_level": level,
        "last_seen_at": question_index,
        "next_review_after": next_review_interval(level),
        "average_response_time_ms": _running_average(state, response_time_ms),
        "total_exposures": state.total_exposures + 1,
    })


def update_incorrect(
    state: MemoryState,
    response_time_ms: float,
    question_index: int,
) -> MemoryState:
    """Return the state after an incorrect answer.

    The forgetting penalty drops MASTERED items two levels and any other
    level one, never below NEW.
    """
    history = _append_outcome(state.error_history, 0)
    current = StrengthLevel(state.strength_level)
    level = StrengthLevel(max(0, current - FORGETTING_PENALTY[current]))

    return state.model_copy(update={
        "incorrect_count": state.incorrect_count + 1,
        "error_history": history,
        "strength_level": level,
        "last_seen_at": question_index,
        "next_review_after": next_review_interval(level),
        "average_response_time_ms": _running_average(state, response_time_ms),
        "total_exposures": state.total_exposures + 1,
    })
