"""Tests for settings and vocabulary loading."""

import pytest

from alphabet_trainer.config import Settings, load_vocabulary


def test_defaults_from_yaml():
    settings = Settings()
    assert settings.save_debounce_seconds == 0.5
    assert settings.max_session_history == 50
    assert settings.questions_per_session == 10
    assert settings.quiz_id == "fatha-quiz"


def test_env_override(monkeypatch):
    monkeypatch.setenv("TRAINER_PORT", "9100")
    monkeypatch.setenv("TRAINER_MAX_SESSION_HISTORY", "20")
    settings = Settings()
    assert settings.port == 9100
    assert settings.max_session_history == 20


def test_paths(tmp_path):
    settings = Settings(data_dir=tmp_path / "data")
    assert settings.progress_path == tmp_path / "data" / "progress.json"
    assert settings.legacy_stats_path.parent.exists()


def test_vocabulary():
    items = load_vocabulary()
    assert len(items) == 28
    assert len(set(items)) == 28
    assert items[0] == "ا"


def test_missing_vocabulary(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_vocabulary(tmp_path / "nope.yaml")
