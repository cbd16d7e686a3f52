"""Progress persistence (JSON + fcntl.flock + atomic write)."""

import fcntl
import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Protocol

import structlog
from pydantic import ValidationError

from alphabet_trainer.models.gamification import StreakData
from alphabet_trainer.models.progress import UserProgress

logger = structlog.get_logger()

MAX_SESSION_HISTORY = 50


class ProgressStore(Protocol):
    """Owner of the canonical progress snapshot."""

    def load(self) -> UserProgress: ...

    def save(self, progress: UserProgress) -> None: ...


def default_progress() -> UserProgress:
    return UserProgress()


def prepare_for_storage(
    progress: UserProgress,
    max_history: int = MAX_SESSION_HISTORY,
) -> UserProgress:
    """Trim history, round accuracy and stamp the update time."""
    return progress.model_copy(update={
        "session_history": progress.session_history[:max_history],
        "global_accuracy": round(progress.global_accuracy, 2),
        "last_updated": datetime.now(),
    })


def _to_json(progress: UserProgress, indent: int | None = None) -> str:
    return json.dumps(progress.model_dump(mode="json"), ensure_ascii=False, indent=indent)


class JsonProgressStore:
    """Stores the snapshot as a single JSON document.

    Args:
        path: File holding the snapshot.
        max_history: Session records kept on save.
    """

    def __init__(self, path: Path, max_history: int = MAX_SESSION_HISTORY):
        self.path = Path(path)
        self.max_history = max_history

    def load(self) -> UserProgress:
        """Read the snapshot; any missing or unreadable file yields defaults."""
        if not self.path.exists():
            return default_progress()
        try:
            with open(self.path, encoding="utf-8") as f:
                fcntl.flock(f, fcntl.LOCK_SH)
                data = json.load(f)
                fcntl.flock(f, fcntl.LOCK_UN)
            return UserProgress.model_validate(data)
        except (OSError, ValueError) as e:
            # json.JSONDecodeError and ValidationError are both ValueErrors
            logger.warning("progress_load_failed", path=str(self.path), error=str(e))
            return default_progress()

    def save(self, progress: UserProgress) -> None:
        prepared = prepare_for_storage(progress, self.max_history)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = _to_json(prepared)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", dir=self.path.parent, delete=False, suffix=".json", encoding="utf-8"
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
            os.replace(tmp_name, self.path)
        except OSError:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("progress_saved", path=str(self.path))

    def clear(self) -> bool:
        """Delete stored progress. Returns False if nothing was stored."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        return True


class InMemoryProgressStore:
    """Keeps the snapshot in memory; counts writes."""

    def __init__(self, progress: UserProgress | None = None):
        self.progress = progress
        self.save_count = 0

    def load(self) -> UserProgress:
        return self.progress if self.progress is not None else default_progress()

    def save(self, progress: UserProgress) -> None:
        self.progress = progress
        self.save_count += 1


def export_progress(progress: UserProgress) -> str:
    """Pretty JSON backup of the snapshot."""
    return _to_json(progress, indent=2)


def import_progress(text: str) -> UserProgress | None:
    """Parse a backup produced by :func:`export_progress`."""
    try:
        return UserProgress.model_validate_json(text)
    except ValidationError as e:
        logger.error("progress_import_failed", error=str(e))
        return None


def migrate_legacy_stats(data: dict) -> UserProgress:
    """Map the older flat stats document onto a fresh snapshot.

    Only lifetime counters and the daily streak carry over; memory states
    and XP start from scratch.
    """
    return default_progress().model_copy(update={
        "total_sessions": int(data.get("totalSessions") or 0),
        "total_questions_answered": int(data.get("totalQuestionsAnswered") or 0),
        "total_correct_answers": int(data.get("totalCorrectAnswers") or 0),
        "global_accuracy": float(data.get("averageAccuracy") or 0),
        "total_time_spent": int(data.get("totalTimeSpent") or 0),
        "streak": StreakData(
            daily_streak=int(data.get("currentStreak") or 0),
            longest_daily_streak=int(data.get("longestStreak") or 0),
        ),
    })


def read_legacy_stats(path: Path) -> UserProgress | None:
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return migrate_legacy_stats(data)
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.warning("legacy_stats_migration_failed", path=str(path), error=str(e))
        return None


def initialize_progress(store: ProgressStore, legacy_path: Path | None = None) -> UserProgress:
    """Load progress, migrating legacy stats when no sessions exist yet."""
    progress = store.load()
    if progress.total_sessions == 0 and legacy_path is not None:
        migrated = read_legacy_stats(legacy_path)
        if migrated is not None:
            logger.info("legacy_stats_migrated", sessions=migrated.total_sessions)
            store.save(migrated)
            return migrated
    return progress
