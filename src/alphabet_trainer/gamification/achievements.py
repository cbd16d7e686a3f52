"""Achievement rule table and unlock evaluation.

Achievements are data: each entry carries a pure predicate over the whole
progress snapshot. Evaluation is keyed by id against the unlocked set, so
re-running it on an unchanged snapshot never yields duplicates.
"""

from collections.abc import Iterable
from datetime import datetime

import structlog

from alphabet_trainer.models.gamification import Achievement, Rarity, UnlockedAchievement
from alphabet_trainer.models.memory import StrengthLevel
from alphabet_trainer.models.progress import UserProgress

logger = structlog.get_logger()

FATHA_LETTER_COUNT = 28


def _mastered_count(progress: UserProgress) -> int:
    return sum(
        1 for s in progress.memory_states.values()
        if s.strength_level == StrengthLevel.MASTERED
    )


ACHIEVEMENTS: tuple[Achievement, ...] = (
    # Beginner
    Achievement(
        id="first_steps",
        name="First Steps",
        description="Complete your first quiz",
        icon="🎯",
        rarity=Rarity.COMMON,
        reward=20,
        condition=lambda p: p.total_sessions >= 1,
    ),
    Achievement(
        id="quick_learner",
        name="Quick Learner",
        description="Answer 10 questions correctly",
        icon="⚡",
        rarity=Rarity.COMMON,
        reward=30,
        condition=lambda p: p.total_correct_answers >= 10,
    ),
    # Answer streaks
    Achievement(
        id="on_fire",
        name="On Fire",
        description="Get 5 correct answers in a row",
        icon="🔥",
        rarity=Rarity.COMMON,
        reward=50,
        condition=lambda p: p.streak.longest_streak >= 5,
    ),
    Achievement(
        id="unstoppable",
        name="Unstoppable",
        description="Get 10 correct answers in a row",
        icon="💪",
        rarity=Rarity.RARE,
        reward=100,
        condition=lambda p: p.streak.longest_streak >= 10,
    ),
    Achievement(
        id="legendary_streak",
        name="Legendary Streak",
        description="Get 20 correct answers in a row",
        icon="👑",
        rarity=Rarity.LEGENDARY,
        reward=300,
        condition=lambda p: p.streak.longest_streak >= 20,
    ),
    # Daily streaks
    Achievement(
        id="week_warrior",
        name="Week Warrior",
        description="Practice 7 days in a row",
        icon="📅",
        rarity=Rarity.RARE,
        reward=150,
        condition=lambda p: p.streak.daily_streak >= 7,
    ),
    Achievement(
        id="month_master",
        name="Month Master",
        description="Practice 30 days in a row",
        icon="🌟",
        rarity=Rarity.EPIC,
        reward=500,
        condition=lambda p: p.streak.daily_streak >= 30,
    ),
    # Accuracy
    Achievement(
        id="perfect_ten",
        name="Perfect 10",
        description="Complete a quiz with 100% accuracy",
        icon="💯",
        rarity=Rarity.RARE,
        reward=100,
        condition=lambda p: any(r.stats.accuracy == 100 for r in p.session_history),
    ),
    Achievement(
        id="accuracy_ace",
        name="Accuracy Ace",
        description="Maintain 90%+ average accuracy",
        icon="🎓",
        rarity=Rarity.EPIC,
        reward=200,
        condition=lambda p: p.global_accuracy >= 90,
    ),
    # Mastery
    Achievement(
        id="fatha_master",
        name="Fatha Master",
        description=f"Master all {FATHA_LETTER_COUNT} Fatha letters",
        icon="🏆",
        rarity=Rarity.LEGENDARY,
        reward=500,
        condition=lambda p: _mastered_count(p) >= FATHA_LETTER_COUNT,
    ),
    # Volume
    Achievement(
        id="dedicated_learner",
        name="Dedicated Learner",
        description="Complete 10 quizzes",
        icon="📚",
        rarity=Rarity.COMMON,
        reward=50,
        condition=lambda p: p.total_sessions >= 10,
    ),
    Achievement(
        id="quiz_champion",
        name="Quiz Champion",
        description="Complete 50 quizzes",
        icon="🏅",
        rarity=Rarity.RARE,
        reward=200,
        condition=lambda p: p.total_sessions >= 50,
    ),
    Achievement(
        id="century_club",
        name="Century Club",
        description="Complete 100 quizzes",
        icon="💎",
        rarity=Rarity.EPIC,
        reward=500,
        condition=lambda p: p.total_sessions >= 100,
    ),
    # Speed
    Achievement(
        id="speed_demon",
        name="Speed Demon",
        description="Answer 10 questions in under 2 seconds each",
        icon="⚡",
        rarity=Rarity.RARE,
        reward=150,
        condition=lambda p: any(
            r.stats.average_response_time < 2000 and r.stats.total_questions >= 10
            for r in p.session_history
        ),
    ),
)

_BY_ID: dict[str, Achievement] = {a.id: a for a in ACHIEVEMENTS}


def get_achievement(achievement_id: str) -> Achievement | None:
    return _BY_ID.get(achievement_id)


def check_newly_unlocked(
    progress: UserProgress,
    rules: Iterable[Achievement] = ACHIEVEMENTS,
) -> list[Achievement]:
    """Achievements whose condition holds now but are not yet unlocked."""
    unlocked = progress.unlocked_ids
    return [a for a in rules if a.id not in unlocked and a.is_met(progress)]


def unlock(
    progress: UserProgress,
    achievements: Iterable[Achievement],
    now: datetime | None = None,
) -> UserProgress:
    """Append unlock records; ids already present are skipped."""
    now = now or datetime.now()
    existing = progress.unlocked_ids
    added = []
    for achievement in achievements:
        if achievement.id in existing:
            continue
        existing.add(achievement.id)
        added.append(UnlockedAchievement(achievement_id=achievement.id, unlocked_at=now))
        logger.info(
            "achievement_unlocked",
            achievement_id=achievement.id,
            rarity=achievement.rarity.value,
            reward=achievement.reward,
        )
    if not added:
        return progress
    return progress.model_copy(update={"achievements": (*progress.achievements, *added)})


def mark_seen(progress: UserProgress, achievement_ids: Iterable[str]) -> UserProgress:
    """Flag unlock records as seen by the learner."""
    ids = set(achievement_ids)
    return progress.model_copy(update={
        "achievements": tuple(
            a.model_copy(update={"seen": True}) if a.achievement_id in ids else a
            for a in progress.achievements
        )
    })


def unseen(progress: UserProgress) -> list[UnlockedAchievement]:
    return [a for a in progress.achievements if not a.seen]
