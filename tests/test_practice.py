"""Tests for answer recording and item selection over a snapshot."""

import random
from datetime import date, datetime

import pytest

from alphabet_trainer.engine.practice import (
    apply_answer,
    ensure_memory_states,
    record_answer,
    select_next_item,
)
from alphabet_trainer.models.gamification import StreakData, XPSystem
from alphabet_trainer.models.memory import MemoryState, StrengthLevel
from alphabet_trainer.models.progress import UserProgress

TODAY = date(2026, 3, 2)
NOW = datetime(2026, 3, 2, 18, 30)


@pytest.fixture
def progress():
    return ensure_memory_states(UserProgress(), ["ا", "ب", "ت"])


class TestEnsureMemoryStates:
    def test_creates_missing_only(self, progress):
        assert set(progress.memory_states) == {"ا", "ب", "ت"}
        extended = ensure_memory_states(progress, ["ب", "ث"])
        assert set(extended.memory_states) == {"ا", "ب", "ت", "ث"}
        assert extended.memory_states["ب"] is progress.memory_states["ب"]

    def test_nothing_missing_returns_same_snapshot(self, progress):
        assert ensure_memory_states(progress, ["ا"]) is progress


class TestSelectNextItem:
    def test_empty_progress(self):
        assert select_next_item(UserProgress(), 0) is None

    def test_picks_known_item(self, progress):
        assert select_next_item(progress, 0, rng=random.Random(2)) in {"ا", "ب", "ت"}

    def test_item_filter(self, progress):
        assert select_next_item(progress, 0, item_ids=["ب", "missing"]) == "ب"

    def test_all_excluded(self, progress):
        assert select_next_item(progress, 0, exclude_ids=["ا", "ب", "ت"]) is None


class TestApplyAnswer:
    def test_first_correct_answer(self, progress):
        outcome = apply_answer(progress, "ا", True, 1000, 0, today=TODAY, now=NOW)
        # base + speed + first time
        assert outcome.xp_earned == 30
        assert outcome.leveled_up is False
        assert outcome.new_level == 1
        assert outcome.new_achievements == ()
        assert outcome.feedback_message

        new = outcome.progress
        assert new.memory_states["ا"].correct_count == 1
        assert new.xp.total_xp == 30
        assert new.streak.current_streak == 1
        assert new.streak.daily_streak == 1
        assert new.streak.last_practice_date == TODAY
        assert new.question_counter == 1

    def test_input_snapshot_untouched(self, progress):
        apply_answer(progress, "ا", True, 1000, 0, today=TODAY, now=NOW)
        assert progress.memory_states["ا"].correct_count == 0
        assert progress.xp.total_xp == 0
        assert progress.streak.current_streak == 0

    def test_incorrect_answer(self, progress):
        progress = progress.model_copy(update={"streak": StreakData(current_streak=3, longest_streak=3)})
        outcome = apply_answer(progress, "ب", False, 4000, 5, today=TODAY, now=NOW)
        assert outcome.xp_earned == 0
        assert outcome.progress.streak.current_streak == 0
        assert outcome.progress.streak.longest_streak == 3
        assert outcome.progress.memory_states["ب"].incorrect_count == 1
        assert outcome.progress.question_counter == 6

    def test_streak_bonus_uses_streak_before_answer(self, progress):
        state = MemoryState(item_id="ت", strength_level=StrengthLevel.LEARNING, correct_count=3,
                            total_exposures=3, error_history=(1, 1, 1))
        progress = progress.with_memory_state(state).model_copy(
            update={"streak": StreakData(current_streak=4, longest_streak=4)}
        )
        outcome = apply_answer(progress, "ت", True, 5000, 7, today=TODAY, now=NOW)

        # 10 + 4 * 2 for the answer, then 50 for unlocking "on_fire"
        assert outcome.new_achievements == ("on_fire",)
        assert outcome.xp_earned == 18 + 50
        assert outcome.progress.xp.total_xp == 68
        assert outcome.progress.streak.current_streak == 5
        assert [a.achievement_id for a in outcome.progress.achievements] == ["on_fire"]
        assert outcome.progress.achievements[0].unlocked_at == NOW

    def test_level_up_reported(self, progress):
        progress = progress.model_copy(update={
            "xp": XPSystem(total_xp=95, current_level=1, xp_to_next_level=100, xp_in_current_level=95)
        })
        outcome = apply_answer(progress, "ا", True, 1000, 0, today=TODAY, now=NOW)
        assert outcome.leveled_up is True
        assert outcome.new_level == 2
        assert outcome.progress.xp.xp_in_current_level == 25

    def test_missing_state_created_lazily(self):
        outcome = apply_answer(UserProgress(), "ج", False, 2000, 0, today=TODAY, now=NOW)
        assert outcome.progress.memory_states["ج"].incorrect_count == 1

    def test_record_answer_returns_snapshot(self, progress):
        snapshot = record_answer(progress, "ا", True, 1000, 0, today=TODAY, now=NOW)
        expected = apply_answer(progress, "ا", True, 1000, 0, today=TODAY, now=NOW).progress
        assert isinstance(snapshot, UserProgress)
        assert snapshot.memory_states == expected.memory_states
        assert snapshot.xp == expected.xp
        assert snapshot.streak == expected.streak
