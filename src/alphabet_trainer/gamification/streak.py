"""Answer streaks and daily practice streaks."""

from datetime import date

import structlog

from alphabet_trainer.models.gamification import StreakData

logger = structlog.get_logger()


def create_streak_data() -> StreakData:
    return StreakData()


def update_answer_streak(streak: StreakData, is_correct: bool) -> StreakData:
    """Extend the streak on a correct answer, reset it otherwise.

    ``longest_streak`` is a high-water mark and never decreases.
    """
    if not is_correct:
        return streak.model_copy(update={"current_streak": 0})

    current = streak.current_streak + 1
    return streak.model_copy(update={
        "current_streak": current,
        "longest_streak": max(streak.longest_streak, current),
    })


def _extend_daily(streak: StreakData, today: date, freeze_available: bool) -> StreakData:
    daily = streak.daily_streak + 1
    return streak.model_copy(update={
        "daily_streak": daily,
        "longest_daily_streak": max(streak.longest_daily_streak, daily),
        "last_practice_date": today,
        "freeze_available": freeze_available,
    })


def _restart_daily(streak: StreakData, today: date) -> StreakData:
    return streak.model_copy(update={
        "daily_streak": 1,
        "longest_daily_streak": max(streak.longest_daily_streak, 1),
        "last_practice_date": today,
        "freeze_available": True,
    })


def update_daily_streak(streak: StreakData, today: date) -> StreakData:
    """Count ``today`` towards the daily streak.

    One missed day is forgiven per streak cycle: a two-day gap consumes the
    freeze, a one-day gap restores it.
    """
    if streak.last_practice_date is None:
        return _restart_daily(streak, today)

    gap = (today - streak.last_practice_date).days

    if gap <= 0:
        # Already counted today (or the clock went backwards)
        return streak
    if gap == 1:
        return _extend_daily(streak, today, freeze_available=True)
    if gap == 2 and streak.freeze_available:
        logger.info("streak_freeze_used", daily_streak=streak.daily_streak + 1)
        return _extend_daily(streak, today, freeze_available=False)

    logger.info("daily_streak_broken", previous=streak.daily_streak, gap_days=gap)
    return _restart_daily(streak, today)
