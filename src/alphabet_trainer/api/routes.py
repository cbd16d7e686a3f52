"""REST API routes for practice sessions, progress and achievements."""

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from alphabet_trainer.config import get_settings
from alphabet_trainer.engine.service import (
    NoQuestionAvailableError,
    PracticeService,
    SessionNotFoundError,
)
from alphabet_trainer.gamification.achievements import ACHIEVEMENTS, get_achievement, unseen
from alphabet_trainer.gamification.feedback import summarize_session
from alphabet_trainer.srs.analytics import get_srs_stats

logger = structlog.get_logger()
router = APIRouter(prefix="/api")

_service: PracticeService | None = None


def set_service(service: PracticeService | None) -> None:
    global _service
    _service = service


def get_service() -> PracticeService:
    if _service is None:
        raise HTTPException(status_code=503, detail="Practice service not ready")
    return _service


def validate_session_id(session_id: str) -> str:
    try:
        uuid.UUID(session_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid session ID format")
    return session_id


class StartSessionRequest(BaseModel):
    quiz_id: str | None = None
    total_questions: int | None = Field(default=None, ge=1)


class AnswerRequest(BaseModel):
    choice: str
    response_time_ms: float = Field(ge=0)


class SeenRequest(BaseModel):
    achievement_ids: list[str]


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/progress")
async def get_progress(service: PracticeService = Depends(get_service)) -> dict:
    """Return the full progress snapshot."""
    return service.progress.model_dump(mode="json")


@router.get("/stats")
async def get_stats(service: PracticeService = Depends(get_service)) -> dict:
    """Mastery overview plus XP and streak state."""
    progress = service.progress
    states = [progress.memory_states[i] for i in service.vocabulary if i in progress.memory_states]
    return {
        "srs": get_srs_stats(states),
        "xp": progress.xp.model_dump(mode="json"),
        "streak": progress.streak.model_dump(mode="json"),
        "total_sessions": progress.total_sessions,
        "global_accuracy": round(progress.global_accuracy, 2),
    }


@router.post("/sessions")
async def start_session(
    request: StartSessionRequest,
    service: PracticeService = Depends(get_service),
) -> dict:
    settings = get_settings()
    active = service.start_session(
        quiz_id=request.quiz_id or settings.quiz_id,
        total_questions=request.total_questions or settings.questions_per_session,
    )
    return {
        "session_id": active.accumulator.session_id,
        "quiz_id": active.accumulator.quiz_id,
        "total_questions": active.total_questions,
    }


@router.post("/sessions/{session_id}/next")
async def next_question(
    session_id: str,
    service: PracticeService = Depends(get_service),
) -> dict:
    session_id = validate_session_id(session_id)
    try:
        question = service.next_question(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    except NoQuestionAvailableError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return question.model_dump(mode="json")


@router.post("/sessions/{session_id}/answers")
async def submit_answer(
    session_id: str,
    request: AnswerRequest,
    service: PracticeService = Depends(get_service),
) -> dict:
    session_id = validate_session_id(session_id)
    try:
        outcome = service.answer(session_id, request.choice, request.response_time_ms)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    except NoQuestionAvailableError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {
        "item_id": outcome.item_id,
        "correct": outcome.is_correct,
        "xp_earned": outcome.xp_earned,
        "leveled_up": outcome.leveled_up,
        "level": outcome.new_level,
        "streak": outcome.progress.streak.current_streak,
        "strength_level": int(outcome.memory_state.strength_level),
        "new_achievements": list(outcome.new_achievements),
        "feedback": outcome.feedback_message,
    }


@router.post("/sessions/{session_id}/finish")
async def finish_session(
    session_id: str,
    service: PracticeService = Depends(get_service),
) -> dict:
    session_id = validate_session_id(session_id)
    try:
        completion = service.finish_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    unlocked = [get_achievement(a) for a in completion.stats.new_achievements]
    return {
        "stats": completion.stats.model_dump(mode="json"),
        "summary": summarize_session(
            completion.stats,
            completion.stats.xp_earned,
            [a for a in unlocked if a is not None],
        ),
    }


@router.get("/achievements")
async def list_achievements(service: PracticeService = Depends(get_service)) -> list[dict]:
    """All achievements with their unlock status."""
    unlocked = {a.achievement_id: a for a in service.progress.achievements}
    result = []
    for achievement in ACHIEVEMENTS:
        entry = achievement.public_dict()
        record = unlocked.get(achievement.id)
        entry["unlocked"] = record is not None
        entry["unlocked_at"] = record.unlocked_at.isoformat() if record else None
        entry["seen"] = record.seen if record else False
        result.append(entry)
    return result


@router.post("/achievements/seen")
async def mark_seen(
    request: SeenRequest,
    service: PracticeService = Depends(get_service),
) -> dict:
    progress = service.mark_achievements_seen(request.achievement_ids)
    return {"unseen": [a.achievement_id for a in unseen(progress)]}
