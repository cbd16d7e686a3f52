"""Snapshot transitions for selecting items and recording answers."""

import random
from collections.abc import Iterable
from datetime import date, datetime

import structlog
from pydantic import BaseModel, ConfigDict

from alphabet_trainer.gamification import achievements, streak, xp
from alphabet_trainer.gamification.feedback import get_feedback_message
from alphabet_trainer.models.memory import MemoryState
from alphabet_trainer.models.progress import UserProgress
from alphabet_trainer.srs import memory, selector

logger = structlog.get_logger()


class AnswerOutcome(BaseModel):
    """Result of recording one answer."""

    model_config = ConfigDict(frozen=True)

    progress: UserProgress
    item_id: str
    is_correct: bool
    response_time_ms: float
    memory_state: MemoryState
    xp_earned: int  # answer reward plus any achievement rewards
    leveled_up: bool
    new_level: int
    new_achievements: tuple[str, ...] = ()
    feedback_message: str = ""


def ensure_memory_states(progress: UserProgress, item_ids: Iterable[str]) -> UserProgress:
    """Create NEW states for items that have none yet."""
    missing = [i for i in item_ids if i not in progress.memory_states]
    if not missing:
        return progress
    states = dict(progress.memory_states)
    for item_id in missing:
        states[item_id] = memory.create_memory_state(item_id)
    logger.debug("memory_states_created", count=len(missing))
    return progress.model_copy(update={"memory_states": states})


def select_next_item(
    progress: UserProgress,
    question_index: int,
    exclude_ids: Iterable[str] = (),
    rng: random.Random | None = None,
    item_ids: Iterable[str] | None = None,
) -> str | None:
    """Choose the next item id, or None when nothing is available.

    Only items that already have a memory state are considered; ``item_ids``
    narrows the pool to the active vocabulary.
    """
    states = progress.memory_states
    if item_ids is None:
        pool = list(states.values())
    else:
        pool = [states[i] for i in item_ids if i in states]
    chosen = selector.select_next(pool, question_index, exclude_ids, rng=rng)
    return chosen.item_id if chosen else None


def apply_answer(
    progress: UserProgress,
    item_id: str,
    is_correct: bool,
    response_time_ms: float,
    question_index: int,
    *,
    today: date | None = None,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> AnswerOutcome:
    """Fold one answer into the snapshot.

    Runs the memory update, XP reward, both streak updates and achievement
    evaluation in that order. The XP streak bonus uses the streak as it was
    before this answer.

    Args:
        progress: Current snapshot.
        item_id: Item that was asked.
        is_correct: Whether the learner answered correctly.
        response_time_ms: Latency measured by the caller.
        question_index: Position of this question in the global sequence.
        today: Calendar day for the daily streak (defaults to today).
        now: Timestamp for achievement unlocks (defaults to now).
        rng: Random source for the feedback message.

    Returns:
        AnswerOutcome holding the new snapshot and reward details.
    """
    now = now or datetime.now()
    today = today or now.date()

    progress = ensure_memory_states(progress, [item_id])
    previous = progress.memory_states[item_id]
    if is_correct:
        state = memory.update_correct(previous, response_time_ms, question_index)
    else:
        state = memory.update_incorrect(previous, response_time_ms, question_index)

    reward = xp.reward_for_answer(
        is_correct,
        response_time_ms,
        progress.streak.current_streak,
        is_first_time_correct=is_correct and previous.correct_count == 0,
    )
    xp_update = xp.apply_xp(progress.xp, reward)

    new_streak = streak.update_answer_streak(progress.streak, is_correct)
    new_streak = streak.update_daily_streak(new_streak, today)

    progress = progress.with_memory_state(state).model_copy(update={
        "xp": xp_update.system,
        "streak": new_streak,
        "question_counter": max(progress.question_counter, question_index + 1),
    })

    unlocked = achievements.check_newly_unlocked(progress)
    bonus = sum(a.reward for a in unlocked)
    leveled_up = xp_update.leveled_up
    if unlocked:
        progress = achievements.unlock(progress, unlocked, now=now)
        bonus_update = xp.apply_xp(progress.xp, bonus)
        progress = progress.model_copy(update={"xp": bonus_update.system})
        leveled_up = leveled_up or bonus_update.leveled_up

    if leveled_up:
        logger.info("level_up", level=progress.xp.current_level, total_xp=progress.xp.total_xp)

    logger.debug(
        "answer_recorded",
        item_id=item_id,
        correct=is_correct,
        strength=int(state.strength_level),
        xp=reward + bonus,
        streak=new_streak.current_streak,
    )

    return AnswerOutcome(
        progress=progress,
        item_id=item_id,
        is_correct=is_correct,
        response_time_ms=response_time_ms,
        memory_state=state,
        xp_earned=reward + bonus,
        leveled_up=leveled_up,
        new_level=progress.xp.current_level,
        new_achievements=tuple(a.id for a in unlocked),
        feedback_message=get_feedback_message(
            is_correct, new_streak.current_streak, response_time_ms, rng=rng
        ),
    )


def record_answer(
    progress: UserProgress,
    item_id: str,
    is_correct: bool,
    response_time_ms: float,
    question_index: int,
    **kwargs,
) -> UserProgress:
    """Snapshot-only form of :func:`apply_answer`."""
    return apply_answer(
        progress, item_id, is_correct, response_time_ms, question_index, **kwargs
    ).progress
