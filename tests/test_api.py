# =============================================================================
# API ENDPOINT TESTS
# =============================================================================
# Exercised through FastAPI's TestClient against an in-memory database.
# =============================================================================

import time
from unittest.mock import patch

import anyio
import httpx
import pytest
from sqlalchemy import event
from sqlalchemy.orm import Query

from app.utils.rate_limiter import RateLimiter


def _publish_payload(category_name="Space", num_questions=2):
    return {
        "title": "The Solar System",
        "description": "Planets, moons and the Sun.",
        "categoryName": category_name,
        "questions": [
            {
                "question": f"Question {i + 1}?",
                "explanation": f"Explanation {i + 1}.",
                "answers": [
                    {"answer": "Right", "correct": True},
                    {"answer": "Wrong", "correct": False},
                ],
            }
            for i in range(num_questions)
        ],
    }


class TestServiceEndpoints:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"


class TestCategories:
    """/api/categories"""

    def test_add_duplicate_and_list(self, client):
        response = client.post("/api/categories", json={"title": "Space"})
        assert response.status_code == 201
        assert response.json() == {"id": 1, "title": "Space"}

        response = client.post("/api/categories", json={"title": "Space"})
        assert response.status_code == 409
        assert response.json()["message"] == "A category with this title already exists."

        response = client.get("/api/categories")
        assert response.status_code == 200
        assert response.json() == [{"id": 1, "title": "Space"}]

    def test_sorted_by_title(self, client):
        for title in ["Zoology", "Art"]:
            client.post("/api/categories", json={"title": title})

        titles = [c["title"] for c in client.get("/api/categories").json()]

        assert titles == ["Art", "Zoology"]

    @pytest.mark.parametrize("body", [{"title": "   "}, {}, {"title": None}])
    def test_blank_title(self, client, body):
        response = client.post("/api/categories", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert response.json()["message"]

    def test_duplicate_from_concurrent_insert(self, client):
        client.post("/api/categories", json={"title": "Space"})

        with patch.object(Query, "first", return_value=None):
            response = client.post("/api/categories", json={"title": "Space"})

        assert response.status_code == 409
        assert response.json()["error"] == "duplicate"

    def test_title_too_long(self, client):
        response = client.post("/api/categories", json={"title": "x" * 257})

        assert response.status_code == 400
        assert client.get("/api/categories").json() == []


class TestQuizzes:
    """/api/quizzes"""

    def test_publish_and_fetch(self, client):
        response = client.post("/api/quizzes", json=_publish_payload())
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Quiz published successfully!"
        assert isinstance(body["quizId"], int)
        assert body["createDate"]

        response = client.get(f"/api/quizzes/{body['quizId']}")
        assert response.status_code == 200
        quiz = response.json()
        assert quiz["title"] == "The Solar System"
        assert len(quiz["questions"]) == 2
        for question in quiz["questions"]:
            assert question["id"].startswith("q-db-")
            assert all(isinstance(a["correct"], bool) for a in question["answers"])
            assert [a["correct"] for a in question["answers"]] == [True, False]

    def test_publish_creates_category(self, client):
        client.post("/api/quizzes", json=_publish_payload(category_name="Astronomy"))

        titles = [c["title"] for c in client.get("/api/categories").json()]

        assert titles == ["Astronomy"]

    def test_missing_quiz(self, client):
        response = client.get("/api/quizzes/999999")

        assert response.status_code == 404
        assert response.json()["message"] == "Quiz not found."

    def test_non_numeric_id(self, client):
        response = client.get("/api/quizzes/abc")

        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["title", "questions", "categoryName"])
    def test_missing_fields(self, client, field):
        payload = _publish_payload()
        del payload[field]

        response = client.post("/api/quizzes", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.parametrize("override", [
        {"title": "  "},
        {"questions": []},
        {"categoryName": "  "},
        {"categoryName": "x" * 257},
    ])
    def test_blank_fields(self, client, override):
        payload = {**_publish_payload(), **override}

        response = client.post("/api/quizzes", json=payload)

        assert response.status_code == 400
        assert client.get("/api/published-content").json() == []

    def test_generate(self, client, fake_generator):
        response = client.post(
            "/api/quizzes/generate",
            json={"category": "Science", "title": "The Solar System"},
        )

        assert response.status_code == 200
        assert len(response.json()["questions"]) == 2
        assert fake_generator.prompts == [
            'Generate a quiz about "The Solar System" from the topic of "Science".'
        ]

    def test_generate_failure(self, client, fake_generator):
        fake_generator.fail = True

        response = client.post(
            "/api/quizzes/generate",
            json={"category": "Science", "title": "The Solar System"},
        )

        assert response.status_code == 502
        assert response.json()["error"] == "generation_failed"
        assert "high demand" in response.json()["message"]


class TestPublishedContent:
    """/api/published-content"""

    def test_empty(self, client):
        response = client.get("/api/published-content")

        assert response.status_code == 200
        assert response.json() == []

    def test_grouped_by_category(self, client):
        client.post("/api/quizzes", json=_publish_payload(category_name="Space"))
        client.post("/api/quizzes", json={**_publish_payload(category_name="Art"), "title": "Painters"})
        client.post("/api/categories", json={"title": "Empty"})

        content = client.get("/api/published-content").json()

        assert [c["title"] for c in content] == ["Art", "Space"]
        assert content[0]["quizzes"][0]["title"] == "Painters"
        assert set(content[1]["quizzes"][0]) == {"id", "title", "description", "create_date"}


class TestSessions:
    """/api/sessions lifecycle"""

    def _create(self, client):
        response = client.post("/api/sessions")
        assert response.status_code == 201
        return response.json()["id"]

    def test_full_lifecycle(self, client):
        session_id = self._create(client)

        view = client.post(
            f"/api/sessions/{session_id}/generate",
            json={"category": "Science", "title": "The Solar System"},
        ).json()
        assert view["state"] == "preview"
        questions = view["quiz"]["questions"]

        view = client.post(f"/api/sessions/{session_id}/start").json()
        assert view["state"] == "taking"

        for question in questions:
            response = client.put(
                f"/api/sessions/{session_id}/answers",
                json={"questionId": question["id"], "answerId": question["answers"][0]["id"]},
            )
            assert response.status_code == 200

        view = client.post(f"/api/sessions/{session_id}/submit", json={}).json()
        assert view["state"] == "results"
        assert view["result"]["score"] == 2
        assert view["result"]["percentage"] == 100

        view = client.post(f"/api/sessions/{session_id}/publish").json()
        assert view["state"] == "results"
        assert view["publish_status"] == "success"
        quiz_id = view["published_quiz_id"]

        stored = client.get(f"/api/quizzes/{quiz_id}").json()
        assert [q["question"] for q in stored["questions"]] == [q["question"] for q in questions]
        titles = [c["title"] for c in client.get("/api/categories").json()]
        assert titles == ["Science"]

        view = client.post(f"/api/sessions/{session_id}/reset").json()
        assert view["state"] == "selecting_topic"
        assert view["quiz"] is None

    def test_take_published_quiz(self, client):
        quiz_id = client.post("/api/quizzes", json=_publish_payload()).json()["quizId"]
        session_id = self._create(client)

        view = client.post(f"/api/sessions/{session_id}/published").json()
        assert view["state"] == "viewing_published"
        assert view["published_content"][0]["quizzes"][0]["id"] == quiz_id

        view = client.post(f"/api/sessions/{session_id}/published/{quiz_id}").json()
        assert view["state"] == "taking"

        answers = {q["id"]: q["answers"][1]["id"] for q in view["quiz"]["questions"]}
        view = client.post(f"/api/sessions/{session_id}/submit", json={"answers": answers}).json()
        assert view["result"]["score"] == 0
        assert view["result"]["percentage"] == 0

    def test_generation_failure_reported_in_snapshot(self, client, fake_generator):
        fake_generator.fail = True
        session_id = self._create(client)

        response = client.post(
            f"/api/sessions/{session_id}/generate",
            json={"category": "Science", "title": "Planets"},
        )

        assert response.status_code == 200
        assert response.json()["state"] == "selecting_topic"
        assert "Failed to generate quiz" in response.json()["error"]

    def test_missing_published_quiz_keeps_list(self, client):
        session_id = self._create(client)
        client.post(f"/api/sessions/{session_id}/published")

        view = client.post(f"/api/sessions/{session_id}/published/999999").json()

        assert view["state"] == "viewing_published"
        assert view["error"] == "Quiz not found."

    def test_invalid_transition(self, client):
        session_id = self._create(client)

        response = client.post(f"/api/sessions/{session_id}/start")

        assert response.status_code == 409
        assert response.json()["error"] == "invalid_transition"

    def test_incomplete_submission(self, client):
        session_id = self._create(client)
        client.post(
            f"/api/sessions/{session_id}/generate",
            json={"category": "Science", "title": "Planets"},
        )
        client.post(f"/api/sessions/{session_id}/start")

        response = client.post(f"/api/sessions/{session_id}/submit")

        assert response.status_code == 400
        assert response.json()["message"] == "Please answer every question before submitting."
        assert client.get(f"/api/sessions/{session_id}").json()["state"] == "taking"

    def test_unknown_session(self, client):
        response = client.get("/api/sessions/missing")

        assert response.status_code == 404
        assert response.json()["message"] == "Session not found."

    def test_delete_session(self, client):
        session_id = self._create(client)

        assert client.delete(f"/api/sessions/{session_id}").status_code == 204
        assert client.get(f"/api/sessions/{session_id}").status_code == 404


class TestRateLimiting:

    def test_limit_returns_429(self, client, monkeypatch):
        monkeypatch.setattr("app.main.rate_limiter", RateLimiter(requests_per_minute=2))

        statuses = [client.get("/api/categories").status_code for _ in range(3)]

        assert statuses == [200, 200, 429]
        response = client.get("/api/categories")
        assert response.headers["Retry-After"] == "60"
        assert response.json()["error"] == "rate_limit_exceeded"

    def test_health_is_not_limited(self, client, monkeypatch):
        monkeypatch.setattr("app.main.rate_limiter", RateLimiter(requests_per_minute=1))

        statuses = [client.get("/health").status_code for _ in range(3)]

        assert statuses == [200, 200, 200]


class TestEventLoop:
    """Store calls run in the threadpool, not on the event loop"""

    @pytest.mark.parametrize("path", ["/api/categories", "/api/published-content"])
    def test_slow_query_does_not_block_health(self, client, engine, path):
        from app.main import app

        def slow_query(*args):
            time.sleep(1.0)

        timings = {}

        async def call(http, name, url):
            started = time.perf_counter()
            response = await http.get(url)
            timings[name] = time.perf_counter() - started
            assert response.status_code == 200

        async def main():
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
                async with anyio.create_task_group() as tg:
                    tg.start_soon(call, http, "store", path)
                    await anyio.sleep(0.05)
                    tg.start_soon(call, http, "health", "/health")

        event.listen(engine, "before_cursor_execute", slow_query)
        try:
            anyio.run(main)
        finally:
            event.remove(engine, "before_cursor_execute", slow_query)

        assert timings["store"] >= 1.0
        assert timings["health"] < 0.5
