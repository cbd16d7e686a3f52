"""Aggregate progress snapshot and session records."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from alphabet_trainer.models.gamification import StreakData, UnlockedAchievement, XPSystem
from alphabet_trainer.models.memory import MemoryState


class QuizSessionStats(BaseModel):
    """Summary of one finished practice session."""

    model_config = ConfigDict(frozen=True)

    total_questions: int = 0
    correct_answers: int = 0
    wrong_answers: int = 0
    accuracy: int = 0  # percent
    average_response_time: float = 0.0  # ms
    time_spent: int = 0  # seconds
    xp_earned: int = 0
    perfect_round: bool = False
    new_achievements: tuple[str, ...] = ()


class QuizSessionRecord(BaseModel):
    """A session as kept in the progress history."""

    model_config = ConfigDict(frozen=True)

    id: str
    quiz_id: str
    date: datetime = Field(default_factory=datetime.now)
    stats: QuizSessionStats
    items_practiced: tuple[str, ...] = ()


class UserProgress(BaseModel):
    """Complete learner progress; the unit of persistence."""

    model_config = ConfigDict(frozen=True)

    memory_states: dict[str, MemoryState] = Field(default_factory=dict)
    xp: XPSystem = Field(default_factory=XPSystem)
    streak: StreakData = Field(default_factory=StreakData)
    achievements: tuple[UnlockedAchievement, ...] = ()

    total_sessions: int = 0
    total_questions_answered: int = 0
    total_correct_answers: int = 0
    global_accuracy: float = 0.0
    total_time_spent: int = 0  # seconds
    total_xp_earned: int = 0

    # Global question sequence; memory states record positions in it
    question_counter: int = 0

    session_history: tuple[QuizSessionRecord, ...] = ()  # newest first
    last_updated: datetime = Field(default_factory=datetime.now)

    @property
    def unlocked_ids(self) -> set[str]:
        return {a.achievement_id for a in self.achievements}

    def with_memory_state(self, state: MemoryState) -> "UserProgress":
        """Return a copy with ``state`` stored under its item id."""
        return self.model_copy(
            update={"memory_states": {**self.memory_states, state.item_id: state}}
        )
