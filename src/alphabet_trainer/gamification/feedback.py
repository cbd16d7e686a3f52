"""Encouraging feedback text for answers and finished sessions."""

import random
from collections.abc import Sequence

from alphabet_trainer.models.gamification import Achievement
from alphabet_trainer.models.progress import QuizSessionStats

INCORRECT_MESSAGES = (
    "Try again! You've got this! 💪",
    "So close! Listen carefully 🎧",
    "Don't give up! 🌈",
    "Keep trying! You're learning! ⭐",
    "Almost there! 🎯",
)

SPEED_MESSAGES = (
    "Lightning fast! ⚡",
    "Wow! So quick! 🚀",
    "Speed master! 💨",
)

GENERAL_MESSAGES = (
    "Great job! 🎉",
    "Perfect! ⭐",
    "Fantastic! 🌟",
    "Excellent! ✨",
    "Well done! 👏",
    "Brilliant! 💫",
    "Superb! 🎊",
)

FAST_ANSWER_MS = 2000


def get_feedback_message(
    is_correct: bool,
    streak: int,
    response_time_ms: float,
    rng: random.Random | None = None,
) -> str:
    """Pick a message for an answer; speed praise wins over streak praise."""
    rng = rng or random.Random()
    if not is_correct:
        return rng.choice(INCORRECT_MESSAGES)
    if response_time_ms < FAST_ANSWER_MS:
        return rng.choice(SPEED_MESSAGES)
    if streak >= 10:
        return "Unstoppable! 👑"
    if streak >= 5:
        return "You're on fire! 🔥"
    if streak >= 3:
        return "Amazing streak! ⭐"
    return rng.choice(GENERAL_MESSAGES)


def summarize_session(
    stats: QuizSessionStats,
    xp_earned: int,
    new_achievements: Sequence[Achievement] = (),
) -> str:
    parts = [f"+{xp_earned} XP"]

    if stats.accuracy == 100:
        parts.append("Perfect score! 💯")
    elif stats.accuracy >= 90:
        parts.append("Excellent! 🌟")
    elif stats.accuracy >= 75:
        parts.append("Great job! ✨")
    elif stats.accuracy >= 50:
        parts.append("Good effort! 💪")

    if new_achievements:
        count = len(new_achievements)
        parts.append(f"{count} new achievement{'s' if count > 1 else ''}! 🏆")

    return " • ".join(parts)
