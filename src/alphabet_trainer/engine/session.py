"""Practice session accumulation and completion."""

import math
import uuid
from datetime import datetime

import structlog
from pydantic import BaseModel, ConfigDict, Field

from alphabet_trainer.engine.practice import AnswerOutcome
from alphabet_trainer.gamification import achievements, xp
from alphabet_trainer.models.progress import QuizSessionRecord, QuizSessionStats, UserProgress
from alphabet_trainer.storage.progress_store import MAX_SESSION_HISTORY

logger = structlog.get_logger()

DEFAULT_QUIZ_ID = "fatha-quiz"


class SessionAccumulator(BaseModel):
    """Running totals for one practice session."""

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    quiz_id: str = DEFAULT_QUIZ_ID
    started_at: datetime = Field(default_factory=datetime.now)
    correct_answers: int = 0
    wrong_answers: int = 0
    xp_earned: int = 0
    response_times: tuple[float, ...] = ()
    new_achievements: tuple[str, ...] = ()
    items_practiced: tuple[str, ...] = ()

    @property
    def questions_answered(self) -> int:
        return self.correct_answers + self.wrong_answers


class SessionCompletion(BaseModel):
    model_config = ConfigDict(frozen=True)

    progress: UserProgress
    stats: QuizSessionStats
    new_achievements: tuple[str, ...] = ()


def new_session(
    quiz_id: str = DEFAULT_QUIZ_ID,
    now: datetime | None = None,
) -> SessionAccumulator:
    return SessionAccumulator(quiz_id=quiz_id, started_at=now or datetime.now())


def accumulate(acc: SessionAccumulator, outcome: AnswerOutcome) -> SessionAccumulator:
    """Fold an answer outcome into the session totals."""
    items = acc.items_practiced
    if outcome.item_id not in items:
        items = (*items, outcome.item_id)
    return acc.model_copy(update={
        "correct_answers": acc.correct_answers + int(outcome.is_correct),
        "wrong_answers": acc.wrong_answers + int(not outcome.is_correct),
        "xp_earned": acc.xp_earned + outcome.xp_earned,
        "response_times": (*acc.response_times, outcome.response_time_ms),
        "new_achievements": (*acc.new_achievements, *outcome.new_achievements),
        "items_practiced": items,
    })


def finalize_session(acc: SessionAccumulator, now: datetime | None = None) -> QuizSessionStats:
    """Compute summary statistics for the session."""
    now = now or datetime.now()
    total = acc.questions_answered
    accuracy = math.floor(acc.correct_answers / total * 100 + 0.5) if total else 0
    average = sum(acc.response_times) / len(acc.response_times) if acc.response_times else 0.0

    return QuizSessionStats(
        total_questions=total,
        correct_answers=acc.correct_answers,
        wrong_answers=acc.wrong_answers,
        accuracy=accuracy,
        average_response_time=average,
        time_spent=max(0, math.floor((now - acc.started_at).total_seconds())),
        xp_earned=acc.xp_earned,
        perfect_round=total > 0 and acc.wrong_answers == 0,
        new_achievements=acc.new_achievements,
    )


def add_session_to_history(
    progress: UserProgress,
    record: QuizSessionRecord,
    max_history: int = MAX_SESSION_HISTORY,
) -> UserProgress:
    """Prepend a session record and roll its stats into lifetime totals."""
    stats = record.stats
    sessions = progress.total_sessions
    global_accuracy = (
        stats.accuracy if sessions == 0
        else (progress.global_accuracy * sessions + stats.accuracy) / (sessions + 1)
    )
    return progress.model_copy(update={
        "session_history": (record, *progress.session_history)[:max_history],
        "total_sessions": sessions + 1,
        "total_questions_answered": progress.total_questions_answered + stats.total_questions,
        "total_correct_answers": progress.total_correct_answers + stats.correct_answers,
        "global_accuracy": global_accuracy,
        "total_time_spent": progress.total_time_spent + stats.time_spent,
        "total_xp_earned": progress.total_xp_earned + stats.xp_earned,
    })


def complete_session(
    progress: UserProgress,
    acc: SessionAccumulator,
    now: datetime | None = None,
    max_history: int = MAX_SESSION_HISTORY,
) -> SessionCompletion:
    """Finalize the session, store it in history and evaluate achievements.

    Achievements that depend on session totals (quiz counts, accuracy) can
    only unlock here; their XP rewards are added to the session's stats.

    A session with no answers is discarded: it is not stored in history and
    leaves lifetime counters and achievements untouched.
    """
    now = now or datetime.now()
    stats = finalize_session(acc, now=now)
    if acc.questions_answered == 0:
        logger.info("session_discarded", session_id=acc.session_id)
        return SessionCompletion(progress=progress, stats=stats)

    record = QuizSessionRecord(
        id=acc.session_id,
        quiz_id=acc.quiz_id,
        date=now,
        stats=stats,
        items_practiced=acc.items_practiced,
    )
    progress = add_session_to_history(progress, record, max_history=max_history)

    unlocked = achievements.check_newly_unlocked(progress)
    if unlocked:
        bonus = sum(a.reward for a in unlocked)
        progress = achievements.unlock(progress, unlocked, now=now)
        xp_update = xp.apply_xp(progress.xp, bonus)
        stats = stats.model_copy(update={
            "xp_earned": stats.xp_earned + bonus,
            "new_achievements": (*stats.new_achievements, *(a.id for a in unlocked)),
        })
        record = record.model_copy(update={"stats": stats})
        progress = progress.model_copy(update={
            "xp": xp_update.system,
            "session_history": (record, *progress.session_history[1:]),
            "total_xp_earned": progress.total_xp_earned + bonus,
        })

    logger.info(
        "session_completed",
        session_id=acc.session_id,
        questions=stats.total_questions,
        accuracy=stats.accuracy,
        xp_earned=stats.xp_earned,
        achievements=list(stats.new_achievements),
    )
    return SessionCompletion(
        progress=progress,
        stats=stats,
        new_achievements=tuple(a.id for a in unlocked),
    )


def get_quiz_sessions(progress: UserProgress, quiz_id: str) -> list[QuizSessionRecord]:
    return [r for r in progress.session_history if r.quiz_id == quiz_id]


def get_quiz_best_score(progress: UserProgress, quiz_id: str) -> int:
    """Best accuracy recorded for ``quiz_id`` (0 when never played)."""
    sessions = get_quiz_sessions(progress, quiz_id)
    if not sessions:
        return 0
    return max(r.stats.accuracy for r in sessions)
