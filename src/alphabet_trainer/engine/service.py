"""Stateful practice service used by the HTTP layer.

Holds the latest in-memory snapshot and the active sessions for the single
local learner. Every change goes through the engine's snapshot transitions
and is handed to the debounced writer, so the persisted copy may trail the
in-memory one by up to the debounce window.
"""

import random
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime

import structlog

from alphabet_trainer.engine import session as session_ops
from alphabet_trainer.engine.practice import AnswerOutcome, apply_answer, ensure_memory_states
from alphabet_trainer.engine.questions import Question, build_question
from alphabet_trainer.gamification import achievements
from alphabet_trainer.models.progress import UserProgress
from alphabet_trainer.storage.debounce import DebouncedWriter

logger = structlog.get_logger()


class SessionNotFoundError(KeyError):
    pass


class NoQuestionAvailableError(RuntimeError):
    pass


@dataclass
class ActiveSession:
    accumulator: session_ops.SessionAccumulator
    total_questions: int
    questions_asked: int = 0
    current: Question | None = None
    recent_ids: list[str] = field(default_factory=list)


class PracticeService:
    """Drives practice sessions over a shared progress snapshot.

    Args:
        progress: Initial snapshot (usually from the store).
        writer: Debounced writer persisting every new snapshot.
        vocabulary: Item ids of the active vocabulary.
        rng: Random source for selection, distractors and feedback.
        choice_count: Choices offered per question.
        max_history: Session records kept in the snapshot.
    """

    def __init__(
        self,
        progress: UserProgress,
        writer: DebouncedWriter,
        vocabulary: Sequence[str],
        rng: random.Random | None = None,
        choice_count: int = 4,
        max_history: int = session_ops.MAX_SESSION_HISTORY,
    ):
        self.vocabulary = list(vocabulary)
        self.writer = writer
        self.rng = rng or random.Random()
        self.choice_count = choice_count
        self.max_history = max_history
        self.sessions: dict[str, ActiveSession] = {}
        self.progress = ensure_memory_states(progress, self.vocabulary)

    def _commit(self, progress: UserProgress) -> None:
        self.progress = progress
        self.writer.submit(progress)

    def _get(self, session_id: str) -> ActiveSession:
        try:
            return self.sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def start_session(self, quiz_id: str, total_questions: int) -> ActiveSession:
        active = ActiveSession(
            accumulator=session_ops.new_session(quiz_id=quiz_id),
            total_questions=total_questions,
        )
        self.sessions[active.accumulator.session_id] = active
        logger.info(
            "session_started",
            session_id=active.accumulator.session_id,
            quiz_id=quiz_id,
            total_questions=total_questions,
        )
        return active

    def next_question(self, session_id: str) -> Question:
        """Return the pending question, or build a new one."""
        active = self._get(session_id)
        if active.current is not None:
            return active.current
        if active.questions_asked >= active.total_questions:
            raise NoQuestionAvailableError("session has no questions left")

        index = self.progress.question_counter
        question = build_question(
            self.progress, self.vocabulary, index, self.rng,
            exclude_ids=active.recent_ids, choice_count=self.choice_count,
        )
        if question is None and active.recent_ids:
            # Pool exhausted by exclusions; allow repeats
            active.recent_ids.clear()
            question = build_question(
                self.progress, self.vocabulary, index, self.rng,
                choice_count=self.choice_count,
            )
        if question is None:
            raise NoQuestionAvailableError("no items available")

        active.current = question
        active.questions_asked += 1
        return question

    def answer(
        self,
        session_id: str,
        choice: str,
        response_time_ms: float,
        today: date | None = None,
    ) -> AnswerOutcome:
        active = self._get(session_id)
        question = active.current
        if question is None:
            raise NoQuestionAvailableError("no question is awaiting an answer")

        outcome = apply_answer(
            self.progress,
            question.target_item,
            choice == question.target_item,
            response_time_ms,
            question.index,
            today=today,
            rng=self.rng,
        )
        active.accumulator = session_ops.accumulate(active.accumulator, outcome)
        active.current = None
        active.recent_ids = [question.target_item]
        self._commit(outcome.progress)
        return outcome

    def finish_session(self, session_id: str, now: datetime | None = None) -> session_ops.SessionCompletion:
        active = self._get(session_id)
        completion = session_ops.complete_session(
            self.progress, active.accumulator, now=now, max_history=self.max_history
        )
        del self.sessions[session_id]
        if completion.progress is not self.progress:
            self._commit(completion.progress)
        return completion

    def mark_achievements_seen(self, achievement_ids: Sequence[str]) -> UserProgress:
        self._commit(achievements.mark_seen(self.progress, achievement_ids))
        return self.progress
