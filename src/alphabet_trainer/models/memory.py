"""Per-item memory state for the spaced repetition engine."""

from enum import IntEnum

from pydantic import BaseModel, ConfigDict


class StrengthLevel(IntEnum):
    """Mastery tier of a single learning item."""

    NEW = 0
    LEARNING = 1
    FAMILIAR = 2
    MASTERED = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class MemoryState(BaseModel):
    """Learning state of one item.

    ``last_seen_at`` and ``next_review_after`` are measured in questions,
    not wall-clock time. ``error_history`` holds the last few outcomes,
    oldest first (1 = correct, 0 = incorrect).
    """

    model_config = ConfigDict(frozen=True)

    item_id: str
    strength_level: StrengthLevel = StrengthLevel.NEW
    correct_count: int = 0
    incorrect_count: int = 0
    last_seen_at: int = 0
    next_review_after: int = 2
    total_exposures: int = 0
    average_response_time_ms: int = 0
    error_history: tuple[int, ...] = ()
