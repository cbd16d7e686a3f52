"""Tests for answer and daily streaks."""

from datetime import date

from alphabet_trainer.gamification.streak import (
    create_streak_data,
    update_answer_streak,
    update_daily_streak,
)
from alphabet_trainer.models.gamification import StreakData


class TestAnswerStreak:
    def test_correct_extends(self):
        streak = create_streak_data()
        for _ in range(3):
            streak = update_answer_streak(streak, True)
        assert streak.current_streak == 3
        assert streak.longest_streak == 3

    def test_incorrect_resets_but_keeps_longest(self):
        streak = StreakData(current_streak=12, longest_streak=12)
        streak = update_answer_streak(streak, False)
        assert streak.current_streak == 0
        assert streak.longest_streak == 12

    def test_longest_only_grows_past_previous(self):
        streak = StreakData(current_streak=0, longest_streak=8)
        streak = update_answer_streak(streak, True)
        assert streak.longest_streak == 8


class TestDailyStreak:
    def test_first_practice_starts_streak(self):
        streak = update_daily_streak(create_streak_data(), date(2026, 3, 1))
        assert streak.daily_streak == 1
        assert streak.longest_daily_streak == 1
        assert streak.last_practice_date == date(2026, 3, 1)

    def test_same_day_unchanged(self):
        streak = StreakData(daily_streak=4, last_practice_date=date(2026, 3, 1))
        assert update_daily_streak(streak, date(2026, 3, 1)) == streak

    def test_next_day_extends_and_refreshes_freeze(self):
        streak = StreakData(
            daily_streak=4,
            longest_daily_streak=4,
            last_practice_date=date(2026, 3, 1),
            freeze_available=False,
        )
        streak = update_daily_streak(streak, date(2026, 3, 2))
        assert streak.daily_streak == 5
        assert streak.longest_daily_streak == 5
        assert streak.freeze_available is True

    def test_freeze_then_broken(self):
        streak = StreakData(
            daily_streak=5,
            longest_daily_streak=5,
            last_practice_date=date(2026, 3, 1),
            freeze_available=True,
        )
        streak = update_daily_streak(streak, date(2026, 3, 3))
        assert streak.daily_streak == 6
        assert streak.freeze_available is False
        assert streak.longest_daily_streak == 6

        streak = update_daily_streak(streak, date(2026, 3, 5))
        assert streak.daily_streak == 1
        assert streak.freeze_available is True
        assert streak.longest_daily_streak == 6

    def test_three_day_gap_resets_even_with_freeze(self):
        streak = StreakData(daily_streak=9, last_practice_date=date(2026, 3, 1), freeze_available=True)
        streak = update_daily_streak(streak, date(2026, 3, 4))
        assert streak.daily_streak == 1
        assert streak.last_practice_date == date(2026, 3, 4)

    def test_month_boundary(self):
        streak = StreakData(daily_streak=2, last_practice_date=date(2026, 2, 28))
        assert update_daily_streak(streak, date(2026, 3, 1)).daily_streak == 3
