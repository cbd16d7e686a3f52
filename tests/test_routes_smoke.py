"""Smoke tests for API routes."""

import random
import uuid

import pytest
from fastapi.testclient import TestClient

from alphabet_trainer.engine.service import PracticeService
from alphabet_trainer.main import create_app
from alphabet_trainer.models.progress import UserProgress
from alphabet_trainer.storage.debounce import DebouncedWriter
from alphabet_trainer.storage.progress_store import InMemoryProgressStore

VOCAB = ["ا", "ب", "ت", "ث", "ج"]


@pytest.fixture
def store():
    return InMemoryProgressStore()


@pytest.fixture
def service(store):
    writer = DebouncedWriter(store, delay_seconds=0)
    return PracticeService(UserProgress(), writer, VOCAB, rng=random.Random(42))


@pytest.fixture
def client(service):
    with TestClient(create_app(service)) as c:
        yield c


def start(client, total=2) -> str:
    response = client.post("/api/sessions", json={"quiz_id": "fatha-quiz", "total_questions": total})
    assert response.status_code == 200
    return response.json()["session_id"]


class TestHealthCheck:
    def test_health_returns_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestProgress:
    def test_progress_has_vocabulary_states(self, client):
        data = client.get("/api/progress").json()
        assert set(data["memory_states"]) == set(VOCAB)
        assert data["xp"]["current_level"] == 1

    def test_stats(self, client):
        data = client.get("/api/stats").json()
        assert data["srs"]["total"] == len(VOCAB)
        assert data["srs"]["new"] == len(VOCAB)
        assert data["total_sessions"] == 0


class TestPracticeFlow:
    def test_full_session(self, client, service, store):
        session_id = start(client, total=2)

        for _ in range(2):
            question = client.post(f"/api/sessions/{session_id}/next").json()
            assert question["target_item"] in question["choices"]
            # Asking again returns the same pending question
            again = client.post(f"/api/sessions/{session_id}/next").json()
            assert again == question

            answer = client.post(
                f"/api/sessions/{session_id}/answers",
                json={"choice": question["target_item"], "response_time_ms": 1200},
            )
            assert answer.status_code == 200
            body = answer.json()
            assert body["correct"] is True
            assert body["xp_earned"] > 0
            assert body["feedback"]

        assert client.post(f"/api/sessions/{session_id}/next").status_code == 409

        finish = client.post(f"/api/sessions/{session_id}/finish")
        assert finish.status_code == 200
        stats = finish.json()["stats"]
        assert stats["total_questions"] == 2
        assert stats["accuracy"] == 100
        assert "first_steps" in stats["new_achievements"]
        assert finish.json()["summary"].startswith(f"+{stats['xp_earned']} XP")

        service.writer.flush()
        assert store.progress.total_sessions == 1

    def test_wrong_answer(self, client):
        session_id = start(client, total=1)
        question = client.post(f"/api/sessions/{session_id}/next").json()
        wrong = next(c for c in question["choices"] if c != question["target_item"])
        body = client.post(
            f"/api/sessions/{session_id}/answers",
            json={"choice": wrong, "response_time_ms": 2000},
        ).json()
        assert body["correct"] is False
        assert body["xp_earned"] == 0
        assert body["streak"] == 0

    def test_answer_without_question(self, client):
        session_id = start(client)
        response = client.post(
            f"/api/sessions/{session_id}/answers",
            json={"choice": "ا", "response_time_ms": 1000},
        )
        assert response.status_code == 409

    def test_negative_response_time_rejected(self, client):
        session_id = start(client)
        client.post(f"/api/sessions/{session_id}/next")
        response = client.post(
            f"/api/sessions/{session_id}/answers",
            json={"choice": "ا", "response_time_ms": -5},
        )
        assert response.status_code == 422

    def test_finish_without_answers_is_not_recorded(self, client):
        session_id = start(client, total=2)
        client.post(f"/api/sessions/{session_id}/next")

        finish = client.post(f"/api/sessions/{session_id}/finish")
        assert finish.status_code == 200
        assert finish.json()["stats"]["total_questions"] == 0
        assert finish.json()["stats"]["new_achievements"] == []

        assert client.get("/api/stats").json()["total_sessions"] == 0
        assert all(e["unlocked"] is False for e in client.get("/api/achievements").json())
        assert client.post(f"/api/sessions/{session_id}/next").status_code == 404

    def test_session_not_found(self, client):
        response = client.post(f"/api/sessions/{uuid.uuid4()}/next")
        assert response.status_code == 404

    def test_session_invalid_id(self, client):
        response = client.post("/api/sessions/not-a-uuid/next")
        assert response.status_code == 400


class TestAchievements:
    def test_list_and_mark_seen(self, client):
        listing = client.get("/api/achievements").json()
        assert len(listing) == 14
        assert all(entry["unlocked"] is False for entry in listing)

        session_id = start(client, total=1)
        question = client.post(f"/api/sessions/{session_id}/next").json()
        client.post(
            f"/api/sessions/{session_id}/answers",
            json={"choice": question["target_item"], "response_time_ms": 1000},
        )
        client.post(f"/api/sessions/{session_id}/finish")

        listing = {e["id"]: e for e in client.get("/api/achievements").json()}
        assert listing["first_steps"]["unlocked"] is True
        assert listing["first_steps"]["seen"] is False

        response = client.post("/api/achievements/seen", json={"achievement_ids": ["first_steps"]})
        assert "first_steps" not in response.json()["unseen"]
